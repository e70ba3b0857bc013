"""Prediction utilities for the heating-load models.

Models are trained on a possibly transformed target (log or Box-Cox).
This module wraps a fitted trainer together with the fitted
:class:`~heatload.features.transforms.TargetTransformer` so callers can
ask for predictions on either scale.
"""

import logging
from typing import Protocol, runtime_checkable

import numpy as np
import pandas as pd

from heatload.features.transforms import TargetTransformer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol – any fitted trainer is compatible
# ---------------------------------------------------------------------------


@runtime_checkable
class _FittedModel(Protocol):
    """Structural type for any fitted trainer with a ``predict`` method."""

    def predict(self, X: pd.DataFrame) -> np.ndarray: ...


# ---------------------------------------------------------------------------
# Predictor
# ---------------------------------------------------------------------------


class HeatLoadPredictor:
    """Wraps a fitted model to produce heating-load predictions.

    Args:
        model: Any fitted object that exposes a ``predict(X)`` method
            returning transformed-scale predictions.
        target_transformer: The fitted transformer used on the training
            target.
    """

    def __init__(self, model: _FittedModel, target_transformer: TargetTransformer) -> None:
        if not isinstance(model, _FittedModel):
            raise TypeError(
                "model must have a predict(X) method. "
                f"Got {type(model).__name__}."
            )
        self.model = model
        self.target_transformer = target_transformer

    def predict_transformed(self, X: pd.DataFrame) -> np.ndarray:
        """Return raw model predictions on the transformed target scale.

        Args:
            X: Design matrix with the same columns used during training.
        """
        preds = np.asarray(self.model.predict(X), dtype=float)
        logger.debug("predict_transformed: min=%.3f, max=%.3f", preds.min(), preds.max())
        return preds

    def predict_load(self, X: pd.DataFrame) -> np.ndarray:
        """Return predictions back-transformed to the original load scale."""
        return self.target_transformer.inverse_transform(self.predict_transformed(X))

    def predict_dataframe(self, X: pd.DataFrame) -> pd.DataFrame:
        """Return a DataFrame with both transformed and load-scale predictions.

        Returns:
            DataFrame with columns ``predicted_transformed`` and
            ``predicted_load``, indexed like ``X``.
        """
        preds = self.predict_transformed(X)
        return pd.DataFrame(
            {
                "predicted_transformed": preds,
                "predicted_load": self.target_transformer.inverse_transform(preds),
            },
            index=X.index,
        )
