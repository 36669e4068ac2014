"""
Test Run Report

FilterReport counters and the Leaflet QA map.
"""
import json
import re

import networkx as nx
import pytest

from conftest import add_node
from topofilter.report import FilterReport, write_qa_map


def map_arrays(html):
    kept = json.loads(re.search(r"var k=(.*?);\n", html).group(1))
    removed = json.loads(re.search(r"var r=(.*?);\n", html).group(1))
    return kept, removed


class TestFilterReport:
    """Counters derived from a pass."""

    def test_evaluated_and_deleted(self):
        report = FilterReport(mode="density", edges_seen=5, skipped=2)
        report.removed = [("a", "b"), ("c", "d")]
        assert report.evaluated == 3
        assert report.deleted == 2
        assert "deleted=2" in report.summary()


class TestQaMap:
    """Leaflet map of kept and removed edges."""

    def test_edges_without_coordinates_left_off(self, tmp_path):
        G = nx.Graph()
        G.add_node("r", kind="router")
        G.add_node("s", kind="router", lat=None, lon=None)
        add_node(G, "x", "city", 0.0, 0.0, "AA")
        add_node(G, "y", "city", 1.0, 1.0, "AA")
        add_node(G, "z", "city", 2.0, 2.0, "AA")
        G.add_edges_from([("r", "x"), ("x", "y")])
        removed = [("s", "y"), ("y", "z")]

        path = tmp_path / "qa" / "map.html"
        write_qa_map(G, removed, str(path))
        html = path.read_text()

        assert "NaN" not in html
        kept, gone = map_arrays(html)
        assert kept == [[[0.0, 0.0], [1.0, 1.0]]]
        assert gone == [[[1.0, 1.0], [2.0, 2.0]]]
        assert "Kept (1)" in html
        assert "Removed (1)" in html


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
