"""Unit tests for heatload/data/preprocessor.py."""

import numpy as np
import pandas as pd
import pytest

from heatload.data.preprocessor import COLUMN_CODES, EnergyPreprocessor


class TestEnergyPreprocessor:
    def test_drops_unused_columns_and_renames(self, raw_df: pd.DataFrame) -> None:
        df = EnergyPreprocessor().transform(raw_df)
        assert list(df.columns) == COLUMN_CODES

    def test_drops_incomplete_rows(self, raw_df: pd.DataFrame) -> None:
        df = EnergyPreprocessor().transform(raw_df)
        assert len(df) == 768
        assert not df.isnull().any().any()
        assert df.index.equals(pd.RangeIndex(768))

    def test_drops_partial_rows_without_imputing(self, raw_df: pd.DataFrame) -> None:
        raw_df.loc[0, "Y1"] = np.nan
        raw_df.loc[5, "X3"] = np.nan
        df = EnergyPreprocessor().transform(raw_df)
        assert len(df) == 766

    def test_malformed_cells_drop_their_rows(self, raw_df: pd.DataFrame) -> None:
        raw_df = raw_df.astype({"X2": object, "X6": object})
        raw_df.loc[0, "X2"] = "n/a"
        raw_df.loc[7, "X6"] = "north"
        df = EnergyPreprocessor().transform(raw_df)
        assert len(df) == 766
        assert df["sa"].dtype == float
        assert list(df["orient"].cat.categories) == [2, 3, 4, 5]

    def test_categorical_dtypes(self, dataset: pd.DataFrame) -> None:
        assert dataset["oh"].cat.ordered
        assert dataset["ga"].cat.ordered
        assert not dataset["orient"].cat.ordered
        assert not dataset["gad"].cat.ordered
        assert list(dataset["oh"].cat.categories) == [3.5, 7.0]
        assert list(dataset["ga"].cat.categories) == [0.0, 0.1, 0.25, 0.4]
        assert list(dataset["orient"].cat.categories) == [2, 3, 4, 5]
        assert list(dataset["gad"].cat.categories) == [0, 1, 2, 3, 4, 5]

    def test_continuous_columns_are_float(self, dataset: pd.DataFrame) -> None:
        for col in ["rc", "sa", "wa", "ra", "hl", "cl"]:
            assert dataset[col].dtype == float

    def test_descriptive_headers(self, raw_df: pd.DataFrame) -> None:
        names = [
            "Relative Compactness", "Surface Area", "Wall Area", "Roof Area",
            "Overall Height", "Orientation", "Glazing Area",
            "Glazing Area Distribution", "Heating Load", "Cooling Load",
        ]
        raw_df = raw_df.rename(columns=dict(zip([f"X{i}" for i in range(1, 9)] + ["Y1", "Y2"], names)))
        df = EnergyPreprocessor().transform(raw_df)
        assert list(df.columns) == COLUMN_CODES

    def test_positional_fallback(self, raw_df: pd.DataFrame) -> None:
        raw_df.columns = [f"col{i}" for i in range(10)] + ["Unnamed: 10", "Unnamed: 11"]
        df = EnergyPreprocessor().transform(raw_df)
        assert list(df.columns) == COLUMN_CODES
        assert df["sa"].iloc[0] == pytest.approx(514.5)

    def test_wrong_column_count_raises(self, raw_df: pd.DataFrame) -> None:
        raw_df = raw_df.drop(columns=["Y2"])
        with pytest.raises(ValueError, match="Expected 10 data columns"):
            EnergyPreprocessor().transform(raw_df)

    def test_input_not_mutated(self, raw_df: pd.DataFrame) -> None:
        before = raw_df.copy()
        EnergyPreprocessor().transform(raw_df)
        pd.testing.assert_frame_equal(raw_df, before)

    def test_categorical_off(self, raw_df: pd.DataFrame) -> None:
        df = EnergyPreprocessor(categorical=False).transform(raw_df)
        assert not isinstance(df["oh"].dtype, pd.CategoricalDtype)
