"""Evaluation metrics for held-out heating-load prediction.

Metrics are computed on whatever scale the caller passes. The evaluator
passes the *transformed* scale (log / Box-Cox when configured), so errors
for transformed models are not directly comparable in load units with
untransformed ones; the correlation is scale-free.

Primary metrics: **mean squared error** and **Pearson correlation**
between predicted and actual values.
"""

import logging
from typing import Dict

import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

logger = logging.getLogger(__name__)


def pearson_r(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Pearson correlation, ``nan`` for fewer than two points or a constant input."""
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    if y_true.size < 2 or np.std(y_true) == 0 or np.std(y_pred) == 0:
        return float("nan")
    return float(np.corrcoef(y_true, y_pred)[0, 1])


def compute_metrics(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    label: str = "",
) -> Dict[str, float]:
    """Compute a standard suite of regression metrics.

    Args:
        y_true: Held-out target values.
        y_pred: Predictions for the same rows.
        label: Optional label for log output (e.g. the model name).

    Returns:
        Dictionary with the following keys:

        - ``mse``       – Mean Squared Error over the held-out rows.
        - ``rmse``      – Root Mean Squared Error.
        - ``mae``       – Mean Absolute Error.
        - ``r2``        – Coefficient of Determination.
        - ``pearson_r`` – Pearson correlation of predicted vs actual.

    Raises:
        ValueError: If ``y_true`` and ``y_pred`` have different shapes or
            are empty.
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)

    if y_true.shape != y_pred.shape:
        raise ValueError(
            f"Shape mismatch: y_true {y_true.shape} vs y_pred {y_pred.shape}."
        )
    if y_true.size == 0:
        raise ValueError("Cannot compute metrics on an empty sample.")

    mse = float(mean_squared_error(y_true, y_pred))
    mae = float(mean_absolute_error(y_true, y_pred))
    r2 = float(r2_score(y_true, y_pred)) if y_true.size > 1 else float("nan")
    r = pearson_r(y_true, y_pred)

    results: Dict[str, float] = {
        "mse": mse,
        "rmse": float(np.sqrt(mse)),
        "mae": mae,
        "r2": r2,
        "pearson_r": r,
    }

    prefix = f"[{label}] " if label else ""
    logger.info(
        "%sMSE=%.5f | RMSE=%.5f | MAE=%.5f | R²=%.4f | r=%.4f",
        prefix,
        mse,
        results["rmse"],
        mae,
        r2,
        r,
    )

    return results


def metrics_to_dataframe(results: Dict[str, Dict[str, float]]) -> pd.DataFrame:
    """Convert a dict of {model_name: metrics_dict} into a tidy DataFrame.

    Args:
        results: Mapping from model name to the dict returned by
            :func:`compute_metrics`.

    Returns:
        DataFrame with models as rows and metric names as columns.
    """
    return pd.DataFrame(results).T.rename_axis("model")
