"""Unit tests for heatload/evaluation/metrics.py."""

import numpy as np
import pytest

from heatload.evaluation.metrics import compute_metrics, metrics_to_dataframe, pearson_r


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestComputeMetrics:
    def test_perfect_predictions(self) -> None:
        y = np.array([15.5, 20.8, 28.3, 35.1])
        metrics = compute_metrics(y, y)
        assert metrics["mse"] == pytest.approx(0.0, abs=1e-12)
        assert metrics["mae"] == pytest.approx(0.0, abs=1e-12)
        assert metrics["r2"] == pytest.approx(1.0)
        assert metrics["pearson_r"] == pytest.approx(1.0)

    def test_known_mse(self) -> None:
        y_true = np.array([10.0, 20.0, 30.0, 40.0])
        y_pred = np.array([12.0, 20.0, 27.0, 40.0])
        metrics = compute_metrics(y_true, y_pred)
        assert metrics["mse"] == pytest.approx((4.0 + 0.0 + 9.0 + 0.0) / 4)
        assert metrics["rmse"] == pytest.approx(np.sqrt(13.0 / 4))
        assert metrics["mae"] == pytest.approx(5.0 / 4)

    def test_mse_non_negative(self) -> None:
        rng = np.random.default_rng(0)
        y_true, y_pred = rng.normal(size=50), rng.normal(size=50)
        assert compute_metrics(y_true, y_pred)["mse"] >= 0.0

    def test_correlation_ignores_scale(self) -> None:
        y = np.array([1.0, 2.0, 3.0, 5.0])
        metrics = compute_metrics(y, 10.0 * y + 3.0)
        assert metrics["pearson_r"] == pytest.approx(1.0)
        assert metrics["mse"] > 0

    def test_shape_mismatch_raises(self) -> None:
        with pytest.raises(ValueError, match="Shape mismatch"):
            compute_metrics(np.array([1.0, 2.0]), np.array([1.0]))

    def test_empty_raises(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            compute_metrics(np.array([]), np.array([]))

    def test_returns_all_keys(self) -> None:
        y = np.array([12.0, 18.0, 30.0])
        metrics = compute_metrics(y, y * 1.05)
        assert set(metrics.keys()) == {"mse", "rmse", "mae", "r2", "pearson_r"}

    def test_label_does_not_affect_values(self) -> None:
        y = np.array([10.0, 20.0, 25.0])
        y_pred = np.array([11.0, 19.0, 26.0])
        m1 = compute_metrics(y, y_pred, label="ols")
        m2 = compute_metrics(y, y_pred, label="tree")
        for k in m1:
            assert m1[k] == pytest.approx(m2[k])


class TestPearsonR:
    def test_constant_prediction_is_nan(self) -> None:
        assert np.isnan(pearson_r(np.array([1.0, 2.0, 3.0]), np.array([2.0, 2.0, 2.0])))

    def test_single_point_is_nan(self) -> None:
        assert np.isnan(pearson_r(np.array([1.0]), np.array([1.0])))

    def test_negative(self) -> None:
        assert pearson_r(np.array([1.0, 2.0, 3.0]), np.array([3.0, 2.0, 1.0])) == pytest.approx(-1.0)


class TestMetricsToDataFrame:
    def test_shape(self) -> None:
        results = {
            "ols": {"mse": 0.01, "pearson_r": 0.98},
            "tree": {"mse": 0.05, "pearson_r": 0.93},
            "forest": {"mse": 0.02, "pearson_r": 0.97},
        }
        df = metrics_to_dataframe(results)
        assert df.shape == (3, 2)
        assert df.index.name == "model"
        assert df.loc["tree", "mse"] == pytest.approx(0.05)
