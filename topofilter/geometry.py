"""
Geometry kernel for edge filtering.

Planar primitives operate on (lon, lat) pairs, spherical helpers on
GeographicPosition values. The planar tests are a coarse stand-in for
great-circle paths and are only meant for region-sized polygons.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from .config import EARTH_RADIUS_KM

LonLat = Tuple[float, float]
Segment = Tuple[LonLat, LonLat]

PARALLEL_EPS = 1e-8
DEGENERATE_EPS = 1e-12


@dataclass(frozen=True)
class GeographicPosition:
    lat: float
    lon: float

    def as_lonlat(self) -> LonLat:
        return (self.lon, self.lat)


# -----------------------------
# Planar primitives
# -----------------------------
def point_in_polygon(point: LonLat, ring: Sequence[LonLat]) -> bool:
    """
    Crossing-number test of a (lon, lat) point against an implicitly
    closed ring. Every ring edge (i, i-1) that straddles the point's
    latitude and lies to its right toggles membership.
    """
    x, y = point
    inside = False
    n = len(ring)
    j = n - 1
    for i in range(n):
        xi, yi = ring[i]
        xj, yj = ring[j]
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def segments_intersect(seg1: Segment, seg2: Segment) -> bool:
    """Parametric intersection test; near-parallel segments never intersect."""
    (x1, y1), (x2, y2) = seg1
    (x3, y3), (x4, y4) = seg2
    denom = (y4 - y3) * (x2 - x1) - (x4 - x3) * (y2 - y1)
    if abs(denom) < PARALLEL_EPS:
        return False
    ua = ((x4 - x3) * (y1 - y3) - (y4 - y3) * (x1 - x3)) / denom
    ub = ((x2 - x1) * (y1 - y3) - (y2 - y1) * (x1 - x3)) / denom
    return 0.0 <= ua <= 1.0 and 0.0 <= ub <= 1.0


def midpoint(p1: GeographicPosition, p2: GeographicPosition) -> GeographicPosition:
    # arithmetic mean, not the geodesic midpoint
    return GeographicPosition((p1.lat + p2.lat) / 2.0, (p1.lon + p2.lon) / 2.0)


# -----------------------------
# Spherical helpers
# -----------------------------
def hs(x: float) -> float:
    """Haversine: sin^2(x / 2)."""
    return math.sin(x / 2.0) ** 2


def ihs(x: float) -> float:
    """Inverse haversine for x in [0, 1]."""
    return 2.0 * math.asin(math.sqrt(x))


def rad2deg(x: float) -> float:
    return math.degrees(x)


def spherical_dist(p1: GeographicPosition, p2: GeographicPosition) -> float:
    """Central angle between two positions, in radians."""
    lat1, lon1, lat2, lon2 = map(math.radians, (p1.lat, p1.lon, p2.lat, p2.lon))
    h = hs(lat2 - lat1) + math.cos(lat1) * math.cos(lat2) * hs(lon2 - lon1)
    return ihs(min(1.0, max(0.0, h)))


def spherical_dist_to_km(angle: float) -> float:
    return angle * EARTH_RADIUS_KM


def inclusion_angle(a: float, b: float, c: float) -> float:
    """
    Angle at a point opposite the edge side ``c`` of the spherical triangle
    with sides ``a`` and ``b`` to the edge endpoints (law of haversines).

    A point sitting on an endpoint (or its antipode) has no defined angle;
    it is reported as pi so it always counts as lying on the edge.
    """
    denom = math.sin(a) * math.sin(b)
    if abs(denom) < DEGENERATE_EPS:
        return math.pi
    ratio = (hs(c) - hs(a - b)) / denom
    return ihs(min(1.0, max(0.0, ratio)))
