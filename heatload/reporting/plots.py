"""Diagnostic and comparison charts for the heating-load report."""

import logging
from pathlib import Path
from typing import Optional, Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402

logger = logging.getLogger(__name__)


def plot_predicted_vs_actual(
    pairs: pd.DataFrame,
    title: str = "Predicted vs actual heating load",
    ax: Optional[plt.Axes] = None,
) -> plt.Figure:
    """Scatter of predicted against actual values with the y = x line.

    Args:
        pairs: DataFrame with ``predicted`` and ``actual`` columns.
        title: Axes title.
        ax: Draw into this axes instead of a new figure.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 6))
    else:
        fig = ax.figure

    actual = pairs["actual"].to_numpy(dtype=float)
    predicted = pairs["predicted"].to_numpy(dtype=float)
    ax.scatter(actual, predicted, alpha=0.6, s=18)

    lo = min(actual.min(), predicted.min())
    hi = max(actual.max(), predicted.max())
    ax.plot([lo, hi], [lo, hi], "r--", lw=1.5, label="y = x")

    ax.set_xlabel("Actual")
    ax.set_ylabel("Predicted")
    ax.set_title(title)
    ax.legend(loc="upper left")
    fig.tight_layout()
    return fig


def plot_residuals(
    fitted: np.ndarray,
    resid: np.ndarray,
    title: str = "Residuals vs fitted",
) -> plt.Figure:
    """Residual-vs-fitted scatter plus a normal Q-Q plot of residuals."""
    from scipy import stats

    fig, axes = plt.subplots(1, 2, figsize=(12, 5))

    axes[0].scatter(fitted, resid, alpha=0.6, s=18)
    axes[0].axhline(0.0, color="red", ls="--", lw=1.5)
    axes[0].set_xlabel("Fitted")
    axes[0].set_ylabel("Residual")
    axes[0].set_title(title)

    stats.probplot(np.asarray(resid, dtype=float), dist="norm", plot=axes[1])
    axes[1].set_title("Normal Q-Q")

    fig.tight_layout()
    return fig


def plot_feature_importance(importances: pd.Series, title: str) -> plt.Figure:
    """Horizontal bar chart of feature importances, largest on top."""
    fig, ax = plt.subplots(figsize=(7, 0.4 * len(importances) + 1.5))
    ordered = importances.sort_values()
    ax.barh(ordered.index.astype(str), ordered.to_numpy(), alpha=0.8)
    ax.set_xlabel("Importance")
    ax.set_title(title)
    fig.tight_layout()
    return fig


def save_figure(fig: plt.Figure, path: Union[str, Path], dpi: int = 120) -> Path:
    """Save ``fig`` to ``path`` and close it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved figure: %s", path)
    return path
