"""
Exclusion regions (e.g. mountain ranges) that no edge path may cross.

Regions are read from a GeoJSON FeatureCollection; only MultiPolygon
features are imported. Malformed features or coordinate tuples are logged
and skipped, while an unreadable document aborts the load.
"""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from shapely import STRtree
from shapely.geometry import MultiPoint

from .geometry import GeographicPosition, LonLat, point_in_polygon, segments_intersect

logger = logging.getLogger(__name__)

MULTIPOLYGON = "MultiPolygon"


@dataclass(frozen=True)
class Polygon:
    """Closed rings of (lon, lat) pairs; the last point joins the first."""

    rings: Tuple[Tuple[LonLat, ...], ...]


def _parse_coordinate(raw) -> Optional[LonLat]:
    if not isinstance(raw, (list, tuple)):
        logger.error("Failed to parse coordinate: expected a pair, got %r", raw)
        return None
    try:
        values = [float(v) for v in raw]
    except (TypeError, ValueError) as exc:
        logger.error("Failed to parse coordinate %r: %s", raw, exc)
        return None
    if len(values) != 2 or not all(math.isfinite(v) for v in values):
        logger.error("Failed to parse coordinate: expected two finite values, got %r", raw)
        return None
    return (values[0], values[1])


def _parse_multipolygon(coordinates) -> Polygon:
    if not isinstance(coordinates, list):
        raise ValueError("MultiPolygon coordinates must be a list")
    rings: List[Tuple[LonLat, ...]] = []
    for poly_array in coordinates:
        if not isinstance(poly_array, list):
            raise ValueError("MultiPolygon member must be a list of rings")
        for ring_array in poly_array:
            if not isinstance(ring_array, list):
                raise ValueError("Ring must be a list of coordinates")
            ring = [pt for pt in (_parse_coordinate(c) for c in ring_array) if pt is not None]
            if ring:
                rings.append(tuple(ring))
    return Polygon(tuple(rings))


def parse_feature_collection(root) -> List[Polygon]:
    """Extract polygons from an already decoded FeatureCollection."""
    if not isinstance(root, dict) or not isinstance(root.get("features"), list):
        raise ValueError("GeoJSON document has no 'features' list")

    polygons: List[Polygon] = []
    for idx, feature in enumerate(root["features"]):
        try:
            if not isinstance(feature, dict):
                raise ValueError("feature is not an object")
            geometry = feature.get("geometry")
            if not isinstance(geometry, dict):
                raise ValueError("feature has no geometry")
            geom_type = geometry.get("type")
            if not isinstance(geom_type, str):
                raise ValueError("geometry has no type")
            logger.debug("Processing geometry of type: %s", geom_type)
            if geom_type != MULTIPOLYGON:
                continue
            if "coordinates" not in geometry:
                raise ValueError("geometry has no coordinates")
            polygon = _parse_multipolygon(geometry["coordinates"])
        except ValueError as exc:
            logger.error("Error processing feature %d: %s", idx, exc)
            continue
        if polygon.rings:
            polygons.append(polygon)
            logger.debug("Added polygon with %d rings", len(polygon.rings))
    return polygons


def load_polygons(path: str) -> List[Polygon]:
    """
    Load MultiPolygon features from a GeoJSON file.

    Raises:
        FileNotFoundError: if the file does not exist
        json.JSONDecodeError: if the file is not valid JSON
        ValueError: if the document has no 'features' list
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            root = json.load(f)
        logger.info("Loaded exclusion-region document %s", path)
        polygons = parse_feature_collection(root)
    except (OSError, ValueError) as exc:
        logger.error("Error loading exclusion regions from %s: %s", path, exc)
        raise
    logger.info("Loaded %d exclusion polygons", len(polygons))
    return polygons


class ExclusionRegionStore:
    """
    Answers whether an edge's straight (lon, lat) path touches any region.

    Ring envelopes are indexed in an STRtree so each query only walks rings
    whose bounding box overlaps the edge's bounding box.
    """

    def __init__(self, polygons: Iterable[Polygon]):
        self.polygons: Tuple[Polygon, ...] = tuple(p for p in polygons if p.rings)
        self._rings: List[Tuple[LonLat, ...]] = [
            ring for polygon in self.polygons for ring in polygon.rings
        ]
        self._tree = STRtree([MultiPoint(ring) for ring in self._rings]) if self._rings else None

    @classmethod
    def from_geojson(cls, path: str) -> "ExclusionRegionStore":
        return cls(load_polygons(path))

    def __len__(self) -> int:
        return len(self.polygons)

    @property
    def ring_count(self) -> int:
        return len(self._rings)

    def _candidate_rings(self, a: LonLat, b: LonLat) -> Sequence[Tuple[LonLat, ...]]:
        if self._tree is None:
            return []
        hits = self._tree.query(MultiPoint([a, b]))
        return [self._rings[i] for i in sorted(int(h) for h in hits)]

    def intersects(self, p1: GeographicPosition, p2: GeographicPosition) -> bool:
        a = p1.as_lonlat()
        b = p2.as_lonlat()
        mid = ((a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0)
        for ring in self._candidate_rings(a, b):
            n = len(ring)
            for i in range(n):
                # i == n - 1 is the closing edge back to the first point
                if segments_intersect((a, b), (ring[i], ring[(i + 1) % n])):
                    return True
            if point_in_polygon(mid, ring):
                return True
        return False
