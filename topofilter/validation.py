"""
Table readers for the population and adoption inputs.

Both come from parquet or CSV and are rejected before indexing when a
required column is absent.
"""
from __future__ import annotations

import os
from typing import Optional, Set

import pandas as pd

POPULATION_COLUMNS = {"lat", "lon", "population", "country"}
ADOPTION_COLUMNS = {"country", "percentage"}


def validate_table_schema(df: pd.DataFrame, required_columns: Set[str], source_path: Optional[str] = None) -> None:
    """Raise ValueError naming the population or adoption columns ``df`` lacks."""
    absent = sorted(c for c in required_columns if c not in df.columns)
    if not absent:
        return
    where = f" in {source_path}" if source_path else ""
    raise ValueError(f"Missing required columns{where}: {absent} (have {list(df.columns)})")


def read_table(path: str, required_columns: Set[str]) -> pd.DataFrame:
    """
    Load a parquet or CSV table and check its schema.

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if the extension is unsupported or columns are missing
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Missing table at {path}")

    ext = os.path.splitext(path)[1].lower()
    if ext in (".parquet", ".pq"):
        df = pd.read_parquet(path)
    elif ext in (".csv", ".txt"):
        df = pd.read_csv(path, keep_default_na=False, na_values=[""])
    else:
        raise ValueError(f"Unsupported table format '{ext}' for {path}")

    validate_table_schema(df, required_columns, source_path=path)
    return df
