"""
Test Adoption Table and Filter Config

Country lookups with a default, range validation, and the lengthFilter
configuration keys.
"""
import json

import pandas as pd
import pytest

from topofilter.adoption import AdoptionTable
from topofilter.config import (
    DEFAULT_BETA,
    DEFAULT_MIN_LENGTH,
    DEFAULT_POPULATION_THRESHOLD,
    FilterConfig,
)


class TestAdoptionTable:
    """Internet adoption percentages."""

    def test_lookup_and_fraction(self):
        table = AdoptionTable({"DE": 90.0, "NE": 20.0})
        assert table["DE"] == 90.0
        assert table.fraction("NE") == pytest.approx(0.2)
        assert "DE" in table
        assert len(table) == 2

    def test_missing_country_defaults_to_zero(self):
        table = AdoptionTable({"DE": 90.0})
        assert table["XX"] == 0.0
        assert table.fraction("XX") == 0.0
        assert "XX" not in table

    @pytest.mark.parametrize("bad", [-1.0, 100.5, float("nan")])
    def test_out_of_range_rejected(self, bad):
        with pytest.raises(ValueError):
            AdoptionTable({"DE": bad})

    def test_from_csv(self, tmp_path):
        path = tmp_path / "inet.csv"
        path.write_text("country,percentage\nDE,89.8\nNA,41.0\n")
        table = AdoptionTable.from_file(str(path))
        assert table["DE"] == pytest.approx(89.8)
        assert table["NA"] == pytest.approx(41.0)

    def test_from_frame_missing_column(self):
        with pytest.raises(ValueError, match="Missing required columns"):
            AdoptionTable.from_frame(pd.DataFrame({"country": ["DE"], "users": [3]}))

    def test_missing_column_names_file_and_column(self, tmp_path):
        path = tmp_path / "inet.csv"
        path.write_text("country,users\nDE,3\n")
        with pytest.raises(ValueError) as excinfo:
            AdoptionTable.from_file(str(path))
        message = str(excinfo.value)
        assert str(path) in message
        assert "['percentage']" in message

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "inet.xlsx"
        path.write_text("")
        with pytest.raises(ValueError, match="Unsupported table format"):
            AdoptionTable.from_file(str(path))


class TestFilterConfig:
    """lengthFilter.* parameters."""

    def test_defaults(self):
        cfg = FilterConfig()
        assert cfg.min_length == DEFAULT_MIN_LENGTH
        assert cfg.population_threshold == DEFAULT_POPULATION_THRESHOLD
        assert cfg.beta == DEFAULT_BETA

    def test_nested_mapping(self):
        cfg = FilterConfig.from_mapping(
            {"lengthFilter": {"minLength": 250, "populationThreshold": 5000, "beta": 0.8}}
        )
        assert cfg == FilterConfig(min_length=250.0, population_threshold=5000.0, beta=0.8)

    def test_dotted_mapping_with_defaults(self):
        cfg = FilterConfig.from_mapping({"lengthFilter.minLength": "300"})
        assert cfg.min_length == 300.0
        assert cfg.beta == DEFAULT_BETA

    def test_from_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"lengthFilter": {"minLength": 120.0, "beta": 0.3}}))
        cfg = FilterConfig.from_json(str(path))
        assert cfg.min_length == 120.0
        assert cfg.beta == 0.3

    def test_from_json_requires_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            FilterConfig.from_json(str(path))

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"beta": 0.0},
            {"beta": 1.0},
            {"beta": 1.5},
            {"min_length": 0.0},
            {"min_length": -5.0},
            {"population_threshold": -1.0},
            {"min_length": float("inf")},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            FilterConfig(**kwargs)

    def test_immutable(self):
        cfg = FilterConfig()
        with pytest.raises(AttributeError):
            cfg.beta = 0.9


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
