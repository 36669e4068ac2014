"""
Test Population Store

H3-bucketed populated positions, the windowed scan and table loading.
"""
import math

import pandas as pd
import pytest

from topofilter.geometry import GeographicPosition, spherical_dist
from topofilter.population import PopulatedPosition, PopulationStore


def grid_records():
    rows = []
    for lat in range(-30, 31, 5):
        for lon in range(-30, 31, 5):
            rows.append((float(lat), float(lon), 10.0, "AA"))
    rows.append((1.0, 1.0, 5.0, "BB"))
    rows.append((0.5, -2.0, 0.0, "CC"))
    return rows


class TestScan:
    """Distance-windowed cursor."""

    def test_yields_exactly_records_in_radius(self):
        store = PopulationStore.from_records(grid_records())
        center = GeographicPosition(0.0, 0.0)
        radius_deg = 3.0
        with store.scan(center, radius_deg) as scan:
            got = {(q.lat, q.lon) for q in scan}

        expected = {
            (lat, lon) for lat, lon, _, _ in grid_records()
            if spherical_dist(center, GeographicPosition(lat, lon)) <= math.radians(radius_deg)
        }
        assert got == expected == {(0.0, 0.0), (1.0, 1.0), (0.5, -2.0)}

    def test_zero_population_records_are_yielded(self):
        store = PopulationStore.from_records([(0.0, 0.0, 0.0, "AA")])
        with store.scan(GeographicPosition(0.0, 0.0), 1.0) as scan:
            assert [q.population for q in scan] == [0.0]

    def test_large_radius_covers_everything(self):
        store = PopulationStore.from_records(grid_records())
        with store.scan(GeographicPosition(0.0, 0.0), 180.0) as scan:
            assert sum(1 for _ in scan) == len(store)

    def test_empty_store(self):
        store = PopulationStore([])
        with store.scan(GeographicPosition(10.0, 10.0), 5.0) as scan:
            assert list(scan) == []

    def test_released_after_early_exit(self):
        store = PopulationStore.from_records(grid_records())
        with store.scan(GeographicPosition(0.0, 0.0), 20.0) as scan:
            for _ in scan:
                break
        assert scan.closed
        with pytest.raises(RuntimeError):
            iter(scan)

    def test_released_on_error(self):
        store = PopulationStore.from_records(grid_records())
        with pytest.raises(KeyError):
            with store.scan(GeographicPosition(0.0, 0.0), 20.0) as scan:
                next(iter(scan))
                raise KeyError("boom")
        assert scan.closed


class TestLoading:
    """Building stores from records, frames and files."""

    def test_negative_population_rejected(self):
        with pytest.raises(ValueError):
            PopulationStore([PopulatedPosition(0.0, 0.0, -1.0, "AA")])

    def test_negative_population_rejected_in_frame(self):
        df = pd.DataFrame({"lat": [0.0], "lon": [0.0], "population": [-3.0], "country": ["AA"]})
        with pytest.raises(ValueError, match="negative population"):
            PopulationStore.from_frame(df)

    def test_missing_columns(self):
        df = pd.DataFrame({"lat": [0.0], "lon": [0.0], "population": [3.0]})
        with pytest.raises(ValueError, match="Missing required columns"):
            PopulationStore.from_frame(df)

    def test_from_parquet(self, tmp_path):
        df = pd.DataFrame(
            {"lat": [0.0, 10.0], "lon": [0.0, 10.0], "population": [100.0, 50.0], "country": ["AA", "BB"]}
        )
        path = tmp_path / "pop.parquet"
        df.to_parquet(path, index=False)
        store = PopulationStore.from_file(str(path))
        assert len(store) == 2
        with store.scan(GeographicPosition(10.0, 10.0), 0.5) as scan:
            assert list(scan) == [PopulatedPosition(10.0, 10.0, 50.0, "BB")]

    def test_from_csv_keeps_country_codes(self, tmp_path):
        path = tmp_path / "pop.csv"
        path.write_text("lat,lon,population,country\n-22.5,17.0,2000,NA\n")
        store = PopulationStore.from_file(str(path))
        with store.scan(GeographicPosition(-22.5, 17.0), 1.0) as scan:
            assert [q.country for q in scan] == ["NA"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PopulationStore.from_file(str(tmp_path / "nope.parquet"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
