"""
Population store with a distance-windowed, lazily evaluated scan.

Populated positions are bucketed by H3 cell. A scan around a center visits
the populated cells of the surrounding grid disk nearest-first and yields
only records within the requested angular radius, so callers that stop
early never touch the far cells.
"""
from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import h3
import numpy as np
import pandas as pd

from .config import H3_RES_POPULATION
from .geometry import GeographicPosition, spherical_dist, spherical_dist_to_km
from .validation import POPULATION_COLUMNS, read_table, validate_table_schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PopulatedPosition:
    lat: float
    lon: float
    population: float
    country: str

    @property
    def position(self) -> GeographicPosition:
        return GeographicPosition(self.lat, self.lon)


class PopulationScan:
    """
    Scoped cursor over the populated positions near ``center``.

    Use as a context manager; leaving the ``with`` block releases the
    underlying generator whether or not it was exhausted.
    """

    def __init__(self, store: "PopulationStore", center: GeographicPosition, radius_deg: float):
        self.center = center
        self.radius_deg = radius_deg
        self.closed = False
        self._store = store
        self._it: Optional[Iterator[PopulatedPosition]] = None

    def __enter__(self) -> "PopulationScan":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[PopulatedPosition]:
        if self.closed:
            raise RuntimeError("Population scan already closed")
        if self._it is None:
            self._it = self._store._iter_window(self.center, self.radius_deg)
        return self._it

    def close(self) -> None:
        if self._it is not None:
            self._it.close()
            self._it = None
        self.closed = True


class PopulationStore:
    def __init__(self, records: Iterable[PopulatedPosition], h3_res: int = H3_RES_POPULATION):
        self.h3_res = h3_res
        self._cells: Dict[str, List[PopulatedPosition]] = defaultdict(list)
        self._count = 0
        for rec in records:
            if rec.population < 0:
                raise ValueError(
                    f"Negative population {rec.population} at ({rec.lat}, {rec.lon})"
                )
            self._cells[h3.latlng_to_cell(rec.lat, rec.lon, h3_res)].append(rec)
            self._count += 1
        self._cells = dict(self._cells)
        self._edge_km = h3.average_hexagon_edge_length(h3_res, unit="km")
        logger.info(
            "Indexed %d populated positions in %d H3 cells (res=%d)",
            self._count, len(self._cells), h3_res,
        )

    @classmethod
    def from_records(cls, rows: Iterable[Tuple[float, float, float, str]], h3_res: int = H3_RES_POPULATION):
        """Build from ``(lat, lon, population, country)`` tuples."""
        return cls(
            (PopulatedPosition(float(lat), float(lon), float(pop), str(country))
             for lat, lon, pop, country in rows),
            h3_res=h3_res,
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame, h3_res: int = H3_RES_POPULATION) -> "PopulationStore":
        validate_table_schema(df, POPULATION_COLUMNS)
        df = df.dropna(subset=["lat", "lon", "population"])
        pop = df["population"].to_numpy(dtype=np.float64)
        negative = int((pop < 0).sum())
        if negative:
            raise ValueError(f"Found {negative} rows with negative population")
        lats = df["lat"].to_numpy(dtype=np.float64)
        lons = df["lon"].to_numpy(dtype=np.float64)
        countries = df["country"].fillna("").astype(str).to_numpy()
        return cls(
            (PopulatedPosition(float(la), float(lo), float(p), c)
             for la, lo, p, c in zip(lats, lons, pop, countries)),
            h3_res=h3_res,
        )

    @classmethod
    def from_file(cls, path: str, h3_res: int = H3_RES_POPULATION) -> "PopulationStore":
        return cls.from_frame(read_table(path, POPULATION_COLUMNS), h3_res=h3_res)

    def __len__(self) -> int:
        return self._count

    def scan(self, center: GeographicPosition, radius_deg: float) -> PopulationScan:
        return PopulationScan(self, center, radius_deg)

    # -----------------------------
    # Internal helpers
    # -----------------------------
    def _window_cells(self, center: GeographicPosition, radius_km: float) -> List[str]:
        # Edge lengths vary by about 2x across a resolution and each ring adds
        # at least 1.5 edges of distance, so two rings per average edge
        # always reach past the radius.
        k = int(math.ceil(2.0 * radius_km / self._edge_km)) + 1
        disk_size = 3 * k * (k + 1) + 1
        if disk_size >= len(self._cells):
            cells = list(self._cells)
        else:
            origin = h3.latlng_to_cell(center.lat, center.lon, self.h3_res)
            cells = [c for c in h3.grid_disk(origin, k) if c in self._cells]

        def cell_dist(cell: str) -> float:
            lat, lon = h3.cell_to_latlng(cell)
            return spherical_dist(center, GeographicPosition(lat, lon))

        return sorted(cells, key=lambda c: (cell_dist(c), c))

    def _iter_window(self, center: GeographicPosition, radius_deg: float) -> Iterator[PopulatedPosition]:
        radius = math.radians(radius_deg)
        for cell in self._window_cells(center, spherical_dist_to_km(radius)):
            for rec in self._cells[cell]:
                if spherical_dist(center, rec.position) <= radius:
                    yield rec
