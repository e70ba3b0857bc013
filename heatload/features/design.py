"""Numeric design-matrix construction from the coded building attributes.

Categorical predictors are encoded in one of two ways:

    - ``dummy``:   one indicator column per level except the first
      (treatment coding), as used for the least-squares families.
    - ``ordinal``: the level's position in the category list, as used for
      the tree families, which split on thresholds anyway.

Levels are frozen at ``fit`` so a test fold always produces the same
columns, in the same order, as the training fold.
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin

logger = logging.getLogger(__name__)

ENCODINGS = ("dummy", "ordinal")


def _level_label(level: object) -> str:
    if isinstance(level, float) and level.is_integer():
        return str(int(level))
    return str(level)


class DesignMatrixBuilder(BaseEstimator, TransformerMixin):
    """Build a float design matrix from selected predictor columns.

    Fitted attributes:
        - ``levels_``: category levels per categorical predictor.
        - ``terms_``: predictor name → list of design columns it produced.
        - ``columns_``: all design columns in output order.

    Args:
        predictors: Predictor columns to include, in order.
        encoding: ``"dummy"`` or ``"ordinal"``.
    """

    def __init__(
        self,
        predictors: Optional[Sequence[str]] = None,
        encoding: str = "dummy",
    ) -> None:
        self.predictors = predictors
        self.encoding = encoding

    def fit(self, df: pd.DataFrame, y: Optional[pd.Series] = None) -> "DesignMatrixBuilder":
        """Record predictor levels and the resulting design columns.

        Raises:
            ValueError: For an unknown encoding or missing predictors.
        """
        if self.encoding not in ENCODINGS:
            raise ValueError(
                f"Unknown encoding '{self.encoding}'. Choose from: {list(ENCODINGS)}"
            )
        predictors = list(self.predictors or [])
        missing = [c for c in predictors if c not in df.columns]
        if missing:
            raise ValueError(f"Predictors not found in data: {missing}")

        self.levels_: Dict[str, list] = {}
        self.terms_: Dict[str, List[str]] = {}
        for col in predictors:
            if isinstance(df[col].dtype, pd.CategoricalDtype):
                levels = list(df[col].cat.categories)
                self.levels_[col] = levels
                if self.encoding == "dummy":
                    self.terms_[col] = [
                        f"{col}_{_level_label(lv)}" for lv in levels[1:]
                    ]
                    continue
            self.terms_[col] = [col]

        self.columns_: List[str] = [c for cols in self.terms_.values() for c in cols]
        logger.debug("Design columns (%s): %s", self.encoding, self.columns_)
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Encode ``df`` into the fitted design columns.

        Raises:
            ValueError: If a categorical value was not seen at ``fit``.
        """
        out = {}
        for col in self.terms_:
            if col not in self.levels_:
                out[col] = df[col].to_numpy(dtype=float)
                continue
            levels = self.levels_[col]
            values = np.asarray(df[col], dtype=object)
            unknown = set(values) - set(levels)
            if unknown:
                raise ValueError(f"Unseen levels in '{col}': {sorted(unknown, key=str)}")
            if self.encoding == "dummy":
                for name, level in zip(self.terms_[col], levels[1:]):
                    out[name] = (values == level).astype(float)
            else:
                position = {lv: i for i, lv in enumerate(levels)}
                out[col] = np.array([position[v] for v in values], dtype=float)

        return pd.DataFrame(out, index=df.index, columns=self.columns_)
