# -------------------------
# topofilter configuration
# -------------------------
# config.py: constants & defaults, FilterConfig.
# geometry.py: planar and spherical primitives.
# exclusion.py: exclusion-region polygons (GeoJSON) and crossing test.
# population.py: H3-bucketed population store and windowed scan.
# adoption.py: internet adoption percentages per country.
# scoring.py: population-weighted score and adoption-adjusted length.
# driver.py: edge iteration, deletion collection and commit.
# report.py: run report and QA map.
# cli.py: argparse entrypoint.
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Mapping

# Mean Earth radius used by all spherical distance conversions
EARTH_RADIUS_KM = 6371.0

# Length filter defaults (km, weighted population, lune shape)
DEFAULT_MIN_LENGTH = 100.0
DEFAULT_POPULATION_THRESHOLD = 1000.0
DEFAULT_BETA = 0.5

# Exclusion regions (mountain ranges) shipped next to the data directory
DEFAULT_EXCLUSION_PATH = "filter_data/mountainRanges.json"

# H3 resolution used to bucket populated positions (avg edge ~68 km)
H3_RES_POPULATION = 3

# Config file keys
CONFIG_SECTION = "lengthFilter"
KEY_MIN_LENGTH = "minLength"
KEY_POPULATION_THRESHOLD = "populationThreshold"
KEY_BETA = "beta"


@dataclass(frozen=True)
class FilterConfig:
    min_length: float = DEFAULT_MIN_LENGTH
    population_threshold: float = DEFAULT_POPULATION_THRESHOLD
    beta: float = DEFAULT_BETA

    def __post_init__(self) -> None:
        for name in ("min_length", "population_threshold", "beta"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}")
        if self.min_length <= 0:
            raise ValueError(f"min_length must be positive, got {self.min_length}")
        if self.population_threshold < 0:
            raise ValueError(
                f"population_threshold must be non-negative, got {self.population_threshold}"
            )
        if not 0.0 < self.beta < 1.0:
            raise ValueError(f"beta must lie in (0, 1), got {self.beta}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FilterConfig":
        """
        Build a config from either nested ``{"lengthFilter": {...}}`` or flat
        dotted ``{"lengthFilter.minLength": ...}`` keys. Missing keys keep
        their defaults.
        """
        section = data.get(CONFIG_SECTION)
        if not isinstance(section, Mapping):
            section = {}

        def lookup(key: str, default: float) -> float:
            if key in section:
                return float(section[key])
            dotted = f"{CONFIG_SECTION}.{key}"
            if dotted in data:
                return float(data[dotted])
            return default

        return cls(
            min_length=lookup(KEY_MIN_LENGTH, DEFAULT_MIN_LENGTH),
            population_threshold=lookup(KEY_POPULATION_THRESHOLD, DEFAULT_POPULATION_THRESHOLD),
            beta=lookup(KEY_BETA, DEFAULT_BETA),
        )

    @classmethod
    def from_json(cls, path: str) -> "FilterConfig":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, Mapping):
            raise ValueError(f"Config file {path} must contain a JSON object")
        return cls.from_mapping(data)
