"""Run report and QA map for a filtering pass."""
from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, field
from typing import Hashable, List, Optional, Tuple

from .nodes import geo_node

LEAFLET_TILES = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
LEAFLET_ATTR = "© OSM"


@dataclass
class FilterReport:
    mode: str
    edges_seen: int = 0
    skipped: int = 0            # endpoint is neither city nor landing point
    exempt: int = 0             # shorter than min_length (density pass)
    untouched: int = 0          # no city endpoint (length pass)
    deleted_exclusion: int = 0
    deleted_filter: int = 0
    removed: List[Tuple[Hashable, ...]] = field(default_factory=list)

    @property
    def evaluated(self) -> int:
        return self.edges_seen - self.skipped

    @property
    def deleted(self) -> int:
        return len(self.removed)

    def summary(self) -> str:
        return (
            f"[{self.mode}] seen={self.edges_seen} evaluated={self.evaluated} "
            f"skipped={self.skipped} exempt={self.exempt} untouched={self.untouched} "
            f"deleted={self.deleted} (exclusion={self.deleted_exclusion}, filter={self.deleted_filter})"
        )


def _edge_latlon(G, u, v) -> Optional[List[List[float]]]:
    a, b = geo_node(G, u), geo_node(G, v)
    coords = [a.lat, a.lon, b.lat, b.lon]
    if not all(math.isfinite(c) for c in coords):
        return None
    return [coords[:2], coords[2:]]


def _drawable(G, edges) -> List[List[List[float]]]:
    lines = (_edge_latlon(G, e[0], e[1]) for e in edges)
    return [line for line in lines if line is not None]


def write_qa_map(G, removed_edges: List[Tuple[Hashable, ...]], path: str) -> None:
    """
    Write a Leaflet map of the kept edges of ``G`` (blue) and the removed
    ones (red). Removing an edge leaves its endpoints in ``G``. Edges with an
    endpoint lacking finite coordinates are left off the map.
    """
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    kept = _drawable(G, G.edges())
    removed = _drawable(G, removed_edges)
    html = f"""<!doctype html><html><head>
<meta charset="utf-8"><meta name="viewport" content="width=device-width,initial-scale=1">
<link rel="stylesheet" href="https://unpkg.com/leaflet@1.9.4/dist/leaflet.css">
<style>#map{{height:100vh}}.legend{{background:#fff;padding:10px;border-radius:6px;box-shadow:0 0 10px rgba(0,0,0,.2)}} </style>
</head><body><div id="map"></div>
<script src="https://unpkg.com/leaflet@1.9.4/dist/leaflet.js"></script>
<script>
var map=L.map('map').setView([20,0],2);
L.tileLayer('{LEAFLET_TILES}',{{attribution:'{LEAFLET_ATTR}'}}).addTo(map);
var k={json.dumps(kept)};
k.forEach(function(e){{L.polyline(e,{{color:'blue',weight:1,opacity:.6}}).addTo(map);}});
var r={json.dumps(removed)};
r.forEach(function(e){{L.polyline(e,{{color:'red',weight:1,opacity:.8,dashArray:'4'}}).addTo(map);}});
var leg=L.control({{position:'topright'}});leg.onAdd=function(m){{var d=document.createElement('div');d.className='legend';
d.innerHTML='<b>Edges</b><br><span style="color:blue">&#9473;</span> Kept ({len(kept)})<br><span style="color:red">&#9473;</span> Removed ({len(removed)})';return d;}};leg.addTo(map);
</script></body></html>"""
    with open(path, "w", encoding="utf-8") as f:
        f.write(html)
