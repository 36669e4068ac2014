"""Shared builders for the topofilter test suites."""
import json

import networkx as nx
import pytest

from topofilter import AdoptionTable, FilterConfig, PopulationStore

SQUARE_RING = [[0, 0], [0, 10], [10, 10], [10, 0]]


def add_node(G, n, kind, lat, lon, country=None):
    attrs = {"kind": kind, "lat": lat, "lon": lon}
    if country is not None:
        attrs["country"] = country
    G.add_node(n, **attrs)


def write_geojson(path, features):
    path.write_text(json.dumps({"type": "FeatureCollection", "features": features}))
    return str(path)


def multipolygon_feature(*polygons, name="range"):
    return {
        "type": "Feature",
        "properties": {"name": name},
        "geometry": {"type": "MultiPolygon", "coordinates": [list(p) for p in polygons]},
    }


@pytest.fixture
def adoption():
    return AdoptionTable({"AA": 50.0, "BB": 80.0, "CC": 20.0})


@pytest.fixture
def empty_population():
    return PopulationStore([])


@pytest.fixture
def config():
    return FilterConfig(min_length=100.0, population_threshold=0.0, beta=0.5)


@pytest.fixture
def square_geojson(tmp_path):
    return write_geojson(tmp_path / "ranges.json", [multipolygon_feature([SQUARE_RING])])
