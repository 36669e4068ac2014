"""
Edge scoring: population-weighted density score and adoption-adjusted
maximum length.

The density score sums the population inside a spherical beta-skeleton
lune around the edge, weighted by distance to the edge midpoint, by the
square of the local internet adoption and by how short the edge is
relative to the minimum length.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .adoption import AdoptionTable
from .config import FilterConfig
from .geometry import (
    GeographicPosition,
    inclusion_angle,
    midpoint,
    rad2deg,
    spherical_dist,
    spherical_dist_to_km,
)
from .nodes import GeographicNode
from .population import PopulationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgeScore:
    score: float
    length_km: float
    threshold: float
    exempt: bool = False
    candidates_seen: int = 0

    @property
    def keep(self) -> bool:
        return self.exempt or self.score > self.threshold


def inclusion_threshold(beta: float) -> float:
    """Minimum subtended angle for a point to lie inside the lune."""
    if not 0.0 < beta < 1.0:
        raise ValueError(f"beta must lie in (0, 1), got {beta}")
    return math.pi - math.asin(beta)


def is_in_lune(a: float, b: float, c: float, beta: float) -> bool:
    return inclusion_angle(a, b, c) >= inclusion_threshold(beta)


def population_weight(q: GeographicPosition, m: GeographicPosition, c: float) -> float:
    """Linear falloff from 1 at the midpoint to 0 at half the edge length."""
    return max(0.0, 1.0 - spherical_dist(q, m) / (0.5 * c))


def population_score(
    p1: GeographicPosition,
    p2: GeographicPosition,
    population: PopulationStore,
    adoption: AdoptionTable,
    config: FilterConfig,
) -> EdgeScore:
    """
    Accumulate the weighted population around the edge (p1, p2).

    Edges shorter than ``config.min_length`` are exempt. Otherwise the
    populated positions within the edge's angular length of its midpoint
    are scanned until the score exceeds ``config.population_threshold``
    or the scan runs out.
    """
    threshold = config.population_threshold
    c = spherical_dist(p1, p2)
    c_km = spherical_dist_to_km(c)
    if c_km < config.min_length:
        return EdgeScore(score=0.0, length_km=c_km, threshold=threshold, exempt=True)

    m = midpoint(p1, p2)
    theta = inclusion_threshold(config.beta)
    length_factor = (config.min_length / c_km) ** 2

    score = 0.0
    seen = 0
    with population.scan(m, rad2deg(c)) as candidates:
        for q in candidates:
            seen += 1
            if q.population < 0:
                raise ValueError(f"Negative population {q.population} at ({q.lat}, {q.lon})")
            if q.population == 0:
                continue

            pos = q.position
            a = spherical_dist(p1, pos)
            b = spherical_dist(p2, pos)
            if inclusion_angle(a, b, c) < theta:
                continue

            inet = adoption.fraction(q.country)
            score += population_weight(pos, m, c) * q.population * inet ** 2 * length_factor
            if score > threshold:
                break

    logger.debug("Edge %s-%s: %.1f km, score %.3f after %d candidates", p1, p2, c_km, score, seen)
    return EdgeScore(score=score, length_km=c_km, threshold=threshold, candidates_seen=seen)


def adoption_for_endpoints(
    n1: GeographicNode, n2: GeographicNode, adoption: AdoptionTable
) -> Optional[float]:
    """
    Adoption fraction for an edge: the mean over both city endpoints, the
    single city endpoint's value, or None when neither endpoint is a city.
    """
    fractions = [adoption.fraction(city.country) for city in (n1.as_city(), n2.as_city()) if city is not None]
    if not fractions:
        return None
    return sum(fractions) / len(fractions)


def exceeds_adoption_length(
    p1: GeographicPosition, p2: GeographicPosition, adoption_fraction: float, min_length: float
) -> bool:
    if adoption_fraction >= 1.0:
        raise ValueError(f"Adoption fraction must be below 1, got {adoption_fraction}")
    c_km = spherical_dist_to_km(spherical_dist(p1, p2))
    return c_km > min_length * (1.0 + adoption_fraction)
