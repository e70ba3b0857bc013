"""Unit tests for heatload/features/design.py."""

import numpy as np
import pandas as pd
import pytest

from heatload.features.design import DesignMatrixBuilder


class TestDesignMatrixBuilder:
    def test_dummy_columns(self, dataset: pd.DataFrame) -> None:
        builder = DesignMatrixBuilder(predictors=["sa", "oh", "ga"]).fit(dataset)
        assert builder.columns_ == ["sa", "oh_7", "ga_0.1", "ga_0.25", "ga_0.4"]
        assert builder.terms_["ga"] == ["ga_0.1", "ga_0.25", "ga_0.4"]

    def test_dummy_values(self, dataset: pd.DataFrame) -> None:
        builder = DesignMatrixBuilder(predictors=["oh"]).fit(dataset)
        X = builder.transform(dataset)
        expected = (dataset["oh"].astype(float) == 7.0).astype(float).to_numpy()
        np.testing.assert_array_equal(X["oh_7"].to_numpy(), expected)

    def test_ordinal_codes(self, dataset: pd.DataFrame) -> None:
        builder = DesignMatrixBuilder(predictors=["orient", "ga"], encoding="ordinal").fit(dataset)
        X = builder.transform(dataset)
        assert builder.columns_ == ["orient", "ga"]
        assert set(X["orient"]) == {0.0, 1.0, 2.0, 3.0}
        assert set(X["ga"]) == {0.0, 1.0, 2.0, 3.0}

    def test_test_fold_aligns_with_train(self, dataset: pd.DataFrame) -> None:
        builder = DesignMatrixBuilder(predictors=["gad", "wa"]).fit(dataset)
        subset = dataset[dataset["gad"] == 0]
        X = builder.transform(subset)
        assert list(X.columns) == builder.columns_
        assert X.filter(like="gad_").to_numpy().sum() == 0
        assert X.index.equals(subset.index)

    def test_unseen_level_raises(self, dataset: pd.DataFrame) -> None:
        builder = DesignMatrixBuilder(predictors=["orient"]).fit(dataset)
        other = dataset.copy()
        other["orient"] = pd.Categorical([9] * len(other))
        with pytest.raises(ValueError, match="Unseen levels"):
            builder.transform(other)

    def test_unknown_encoding(self, dataset: pd.DataFrame) -> None:
        with pytest.raises(ValueError, match="Unknown encoding"):
            DesignMatrixBuilder(predictors=["sa"], encoding="onehot").fit(dataset)

    def test_missing_predictor(self, dataset: pd.DataFrame) -> None:
        with pytest.raises(ValueError, match="not found"):
            DesignMatrixBuilder(predictors=["height"]).fit(dataset)
