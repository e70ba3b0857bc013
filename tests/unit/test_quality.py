"""Unit tests for heatload/data/quality.py."""

import pandas as pd
import pytest

from heatload.data.quality import DataQualityChecker


class TestDataQualityChecker:
    def test_schema_passes(self, dataset: pd.DataFrame) -> None:
        DataQualityChecker().validate_schema(dataset)

    def test_schema_missing_column(self, dataset: pd.DataFrame) -> None:
        with pytest.raises(ValueError, match="missing required columns"):
            DataQualityChecker().validate_schema(dataset.drop(columns=["gad"]))

    def test_no_nulls_after_cleaning(self, dataset: pd.DataFrame) -> None:
        summary = DataQualityChecker().report_nulls(dataset)
        assert (summary["missing_count"] == 0).all()

    def test_cardinality(self, dataset: pd.DataFrame) -> None:
        summary = DataQualityChecker().report_cardinality(dataset)
        assert summary.loc["orient", "n_levels"] == 4
        assert summary.loc["gad", "n_levels"] == 6
        assert bool(summary.loc["oh", "ordered"])

    def test_collinearity_flags_area_columns(self, dataset: pd.DataFrame, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING"):
            vif = DataQualityChecker().report_collinearity(dataset)
        assert list(vif.index) == ["rc", "sa", "wa", "ra"]
        assert "High collinearity" in caplog.text

    def test_run_all_returns_vif(self, dataset: pd.DataFrame) -> None:
        vif = DataQualityChecker().run_all(dataset)
        assert vif.name == "vif"
