"""
Node kinds of the geographic graph.

Only cities and sea-cable landing points take part in filtering; every
other node kind passes its edges through untouched.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from .geometry import GeographicPosition


class NodeKind(str, Enum):
    CITY = "city"
    LANDING_POINT = "landing_point"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: Any) -> "NodeKind":
        if isinstance(raw, cls):
            return raw
        key = str(raw or "").strip().lower().replace("-", "_").replace(" ", "_")
        return _KIND_ALIASES.get(key, cls.OTHER)


_KIND_ALIASES = {
    "city": NodeKind.CITY,
    "city_node": NodeKind.CITY,
    "landing_point": NodeKind.LANDING_POINT,
    "landing": NodeKind.LANDING_POINT,
    "sea_cable_landing_point": NodeKind.LANDING_POINT,
}


def _coord(v) -> float:
    # missing, null or non-numeric coordinates become NaN
    try:
        return float(v)
    except (TypeError, ValueError):
        return float("nan")


FILTERABLE_KINDS = frozenset((NodeKind.CITY, NodeKind.LANDING_POINT))


@dataclass(frozen=True)
class CityAttributes:
    country: str


@dataclass(frozen=True)
class GeographicNode:
    kind: NodeKind
    lat: float
    lon: float
    country: Optional[str] = None
    name: Optional[str] = None

    @property
    def position(self) -> GeographicPosition:
        return GeographicPosition(self.lat, self.lon)

    @property
    def is_city(self) -> bool:
        return self.kind is NodeKind.CITY

    @property
    def is_filterable(self) -> bool:
        return self.kind in FILTERABLE_KINDS

    def as_city(self) -> Optional[CityAttributes]:
        if not self.is_city:
            return None
        return CityAttributes(country=self.country or "")

    @classmethod
    def from_attrs(cls, attrs: Mapping[str, Any]) -> "GeographicNode":
        """Read a node from networkx attributes (``kind``, ``lat``, ``lon``, ``country``)."""
        country = attrs.get("country")
        return cls(
            kind=NodeKind.parse(attrs.get("kind")),
            lat=_coord(attrs.get("lat")),
            lon=_coord(attrs.get("lon")),
            country=None if country is None else str(country),
            name=attrs.get("name"),
        )


def geo_node(G, n) -> GeographicNode:
    return GeographicNode.from_attrs(G.nodes[n])
