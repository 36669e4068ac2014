"""
topofilter: prune edges of a geographic network graph.

Edges are removed when their path crosses an excluded region, when the
population around them is too sparse to justify them, or when they exceed
an internet-adoption-adjusted maximum length.
"""
from .adoption import AdoptionTable
from .config import FilterConfig
from .driver import PopulationDensityFilter
from .exclusion import ExclusionRegionStore, Polygon, load_polygons
from .geometry import GeographicPosition
from .nodes import GeographicNode, NodeKind
from .population import PopulatedPosition, PopulationStore
from .report import FilterReport

__version__ = "0.1.0"

__all__ = [
    "AdoptionTable",
    "ExclusionRegionStore",
    "FilterConfig",
    "FilterReport",
    "GeographicNode",
    "GeographicPosition",
    "NodeKind",
    "PopulatedPosition",
    "PopulationDensityFilter",
    "PopulationStore",
    "Polygon",
    "load_polygons",
    "__version__",
]
