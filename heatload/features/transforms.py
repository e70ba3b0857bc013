"""Predictor and target transformations.

Both transformers follow the sklearn ``fit`` / ``transform`` contract so
that anything estimated from data (the Box-Cox exponent) is learned on the
training fold only and then applied unchanged to the held-out fold.

Supported target transforms:
    - ``identity``
    - ``log``    – natural logarithm, back-transformed with ``exp``.
    - ``boxcox`` – power transform with a maximum-likelihood exponent,
      back-transformed with ``inv_boxcox``.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import special, stats
from sklearn.base import BaseEstimator, TransformerMixin

logger = logging.getLogger(__name__)

TARGET_TRANSFORMS = ("identity", "log", "boxcox")


def _require_positive(values: np.ndarray, what: str) -> None:
    if np.any(values <= 0):
        raise ValueError(f"{what} must be strictly positive for this transform.")


class FeatureTransformer(BaseEstimator, TransformerMixin):
    """Apply the natural log to selected predictor columns.

    Args:
        log_columns: Columns replaced by their natural logarithm. Column
            names are kept so downstream code sees the same schema.
    """

    def __init__(self, log_columns: Optional[Sequence[str]] = None) -> None:
        self.log_columns = log_columns

    def fit(self, df: pd.DataFrame, y: Optional[pd.Series] = None) -> "FeatureTransformer":
        self.log_columns_: List[str] = list(self.log_columns or [])
        missing = [c for c in self.log_columns_ if c not in df.columns]
        if missing:
            raise ValueError(f"Cannot log-transform missing columns: {missing}")
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        for col in self.log_columns_:
            values = df[col].to_numpy(dtype=float)
            _require_positive(values, f"Column '{col}'")
            df[col] = np.log(values)
        return df


class TargetTransformer(BaseEstimator, TransformerMixin):
    """Transform the regression target and map predictions back.

    Fitted attributes:
        - ``lambda_``: Box-Cox exponent (``None`` for other methods).

    Args:
        method: One of ``"identity"``, ``"log"`` or ``"boxcox"``.
    """

    def __init__(self, method: str = "identity") -> None:
        self.method = method

    def fit(self, y: np.ndarray, _=None) -> "TargetTransformer":
        """Validate the method and estimate any transform parameter.

        Args:
            y: Training target on the original scale.

        Raises:
            ValueError: For an unknown method or non-positive targets
                under ``log`` / ``boxcox``.
        """
        if self.method not in TARGET_TRANSFORMS:
            raise ValueError(
                f"Unknown target transform '{self.method}'. "
                f"Choose from: {list(TARGET_TRANSFORMS)}"
            )
        y = np.asarray(y, dtype=float)
        self.lambda_: Optional[float] = None
        if self.method == "boxcox":
            _require_positive(y, "Target")
            _, lmbda = stats.boxcox(y)
            self.lambda_ = float(lmbda)
            logger.info("Estimated Box-Cox exponent: %.4f", self.lambda_)
        elif self.method == "log":
            _require_positive(y, "Target")
        return self

    def transform(self, y: np.ndarray) -> np.ndarray:
        y = np.asarray(y, dtype=float)
        if self.method == "log":
            _require_positive(y, "Target")
            return np.log(y)
        if self.method == "boxcox":
            _require_positive(y, "Target")
            return special.boxcox(y, self.lambda_)
        return y.copy()

    def inverse_transform(self, y_t: np.ndarray) -> np.ndarray:
        """Map transformed-scale values back to the original load scale."""
        y_t = np.asarray(y_t, dtype=float)
        if self.method == "log":
            return np.exp(y_t)
        if self.method == "boxcox":
            return special.inv_boxcox(y_t, self.lambda_)
        return y_t.copy()
