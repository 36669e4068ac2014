"""Internet adoption percentages per country."""
from __future__ import annotations

import logging
import math
from typing import Dict, Iterator, Mapping

import pandas as pd

from .validation import ADOPTION_COLUMNS, read_table, validate_table_schema

logger = logging.getLogger(__name__)


class AdoptionTable:
    """
    Read-only country -> percentage lookup. Unknown countries yield 0 so a
    single missing entry never aborts a scan.
    """

    def __init__(self, percentages: Mapping[str, float]):
        table: Dict[str, float] = {}
        for country, pct in percentages.items():
            pct = float(pct)
            if not math.isfinite(pct) or not 0.0 <= pct <= 100.0:
                raise ValueError(f"Adoption for {country!r} must lie in [0, 100], got {pct}")
            table[str(country)] = pct
        self._table = table

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "AdoptionTable":
        validate_table_schema(df, ADOPTION_COLUMNS)
        df = df.dropna(subset=["country", "percentage"])
        if df["country"].duplicated().any():
            dups = sorted(df.loc[df["country"].duplicated(), "country"].astype(str).unique())
            logger.warning("Duplicate adoption rows for %s; keeping the last value", dups)
        return cls(dict(zip(df["country"].astype(str), df["percentage"].astype(float))))

    @classmethod
    def from_file(cls, path: str) -> "AdoptionTable":
        table = cls.from_frame(read_table(path, ADOPTION_COLUMNS))
        logger.info("Loaded internet adoption for %d countries from %s", len(table), path)
        return table

    def __getitem__(self, country: str) -> float:
        return self._table.get(country, 0.0)

    def __contains__(self, country: object) -> bool:
        return country in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def fraction(self, country: str) -> float:
        return self[country] / 100.0
