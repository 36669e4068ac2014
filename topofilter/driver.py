"""
Edge filter driver.

Walks every edge of the graph once, decides which ones to delete and only
removes them after the traversal has finished.
"""
from __future__ import annotations

import logging
import math
from typing import Dict, Hashable, Iterator, Optional, Tuple

from .adoption import AdoptionTable
from .config import DEFAULT_EXCLUSION_PATH, FilterConfig
from .exclusion import ExclusionRegionStore
from .geometry import GeographicPosition
from .nodes import FILTERABLE_KINDS, GeographicNode, NodeKind, geo_node
from .population import PopulationStore
from .report import FilterReport
from .scoring import adoption_for_endpoints, exceeds_adoption_length, population_score

logger = logging.getLogger(__name__)

EdgeHandle = Tuple[Hashable, ...]


class PopulationDensityFilter:
    """
    Prunes edges of a geographic graph.

    ``filter()`` removes long edges through sparsely populated areas,
    ``filter_by_length()`` removes edges longer than an adoption-adjusted
    maximum. When an exclusion store is given, edges crossing any excluded
    region are removed by both passes before anything else is evaluated.
    """

    def __init__(
        self,
        graph,
        config: FilterConfig,
        population: Optional[PopulationStore] = None,
        adoption: Optional[AdoptionTable] = None,
        exclusion: Optional[ExclusionRegionStore] = None,
    ):
        self.graph = graph
        self.config = config
        self.population = population
        self.adoption = adoption
        self.exclusion = exclusion

    @classmethod
    def with_exclusion_file(
        cls,
        graph,
        config: FilterConfig,
        exclusion_path: str = DEFAULT_EXCLUSION_PATH,
        **kwargs,
    ) -> "PopulationDensityFilter":
        return cls(graph, config, exclusion=ExclusionRegionStore.from_geojson(exclusion_path), **kwargs)

    @property
    def exclusion_enabled(self) -> bool:
        return self.exclusion is not None

    # -----------------------------
    # Internal helpers
    # -----------------------------
    def _edges(self) -> Iterator[EdgeHandle]:
        # live views: the graph must not change until the pass commits
        if self.graph.is_multigraph():
            return iter(self.graph.edges(keys=True))
        return iter(self.graph.edges())

    def _endpoints(self, edge: EdgeHandle) -> Optional[Tuple[GeographicNode, GeographicNode]]:
        # other node kinds are never evaluated, so their attributes are not read
        for n in edge[:2]:
            if NodeKind.parse(self.graph.nodes[n].get("kind")) not in FILTERABLE_KINDS:
                return None
        n1 = geo_node(self.graph, edge[0])
        n2 = geo_node(self.graph, edge[1])
        for n, node in ((edge[0], n1), (edge[1], n2)):
            if not (math.isfinite(node.lat) and math.isfinite(node.lon)):
                logger.warning("Node %r has no valid position; skipping edge %r", n, edge)
                return None
        return n1, n2

    def _crosses_exclusion(self, p1: GeographicPosition, p2: GeographicPosition) -> bool:
        return self.exclusion is not None and self.exclusion.intersects(p1, p2)

    def _commit(self, report: FilterReport, to_delete: Dict[EdgeHandle, None]) -> FilterReport:
        self.graph.remove_edges_from(list(to_delete))
        report.removed = list(to_delete)
        logger.info("%d edges deleted by %s filter", report.deleted, report.mode)
        logger.info(report.summary())
        return report

    # -----------------------------
    # Public API
    # -----------------------------
    def filter(self) -> FilterReport:
        """Population-weighted pass."""
        if self.population is None or self.adoption is None:
            raise ValueError("filter() needs both a population store and an adoption table")

        report = FilterReport(mode="density")
        to_delete: Dict[EdgeHandle, None] = {}
        for edge in self._edges():
            report.edges_seen += 1
            endpoints = self._endpoints(edge)
            if endpoints is None:
                report.skipped += 1
                continue
            p1, p2 = endpoints[0].position, endpoints[1].position

            if self._crosses_exclusion(p1, p2):
                to_delete[edge] = None
                report.deleted_exclusion += 1
                continue

            result = population_score(p1, p2, self.population, self.adoption, self.config)
            if result.exempt:
                report.exempt += 1
            elif not result.keep:
                to_delete[edge] = None
                report.deleted_filter += 1

        return self._commit(report, to_delete)

    def filter_by_length(self) -> FilterReport:
        """Adoption-adjusted maximum length pass."""
        if self.adoption is None:
            raise ValueError("filter_by_length() needs an adoption table")

        report = FilterReport(mode="length")
        to_delete: Dict[EdgeHandle, None] = {}
        for edge in self._edges():
            report.edges_seen += 1
            endpoints = self._endpoints(edge)
            if endpoints is None:
                report.skipped += 1
                continue
            n1, n2 = endpoints
            p1, p2 = n1.position, n2.position

            if self._crosses_exclusion(p1, p2):
                to_delete[edge] = None
                report.deleted_exclusion += 1
                continue

            inet = adoption_for_endpoints(n1, n2, self.adoption)
            if inet is None:
                # edges between landing points
                report.untouched += 1
                continue
            if exceeds_adoption_length(p1, p2, inet, self.config.min_length):
                to_delete[edge] = None
                report.deleted_filter += 1

        return self._commit(report, to_delete)
