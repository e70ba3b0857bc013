"""Raw data cleaning for the building energy-efficiency dataset.

The exported table carries ten data columns plus two unused trailing
columns (empty, read by pandas as ``Unnamed: N``) and blank trailing rows.
:class:`EnergyPreprocessor` discards those, renames the data columns to
short codes, drops incomplete rows and assigns categorical dtypes.

The step is stateless: nothing is learned from the data, so it runs once
on the full table before the train/test partition is drawn.
"""

import logging
from typing import Dict, List, Optional

import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Column groups
# ---------------------------------------------------------------------------

# Order of the ten data columns in the source table.
COLUMN_CODES: List[str] = [
    "rc",
    "sa",
    "wa",
    "ra",
    "oh",
    "orient",
    "ga",
    "gad",
    "hl",
    "cl",
]

# Header spellings found in the published files.
_HEADER_MAP: Dict[str, str] = {
    "x1": "rc",
    "x2": "sa",
    "x3": "wa",
    "x4": "ra",
    "x5": "oh",
    "x6": "orient",
    "x7": "ga",
    "x8": "gad",
    "y1": "hl",
    "y2": "cl",
    "relative compactness": "rc",
    "surface area": "sa",
    "wall area": "wa",
    "roof area": "ra",
    "overall height": "oh",
    "orientation": "orient",
    "glazing area": "ga",
    "glazing area distribution": "gad",
    "heating load": "hl",
    "cooling load": "cl",
}

ORDERED_CATEGORICALS = ["oh", "ga"]
UNORDERED_CATEGORICALS = ["orient", "gad"]
CONTINUOUS = ["rc", "sa", "wa", "ra"]
TARGETS = ["hl", "cl"]


class EnergyPreprocessor(BaseEstimator, TransformerMixin):
    """Clean the raw building table into the analysis dataset.

    Args:
        categorical: When ``True`` (default) the four coded attributes are
            cast to pandas categoricals; height and glazing area as
            ordered, orientation and glazing distribution as unordered.
            Orientation codes stay opaque labels.
    """

    def __init__(self, categorical: bool = True) -> None:
        self.categorical = categorical

    def fit(self, df: pd.DataFrame, y: Optional[pd.Series] = None) -> "EnergyPreprocessor":
        """No-op; present for sklearn compatibility."""
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply all cleaning steps to a raw DataFrame.

        Args:
            df: Raw DataFrame (output of :class:`EnergyDataIngestor`).

        Returns:
            DataFrame with exactly the ten coded columns, no missing
            values and a fresh ``RangeIndex``.

        Raises:
            ValueError: If the table does not hold exactly ten data columns.
        """
        df = df.copy()

        # 1. Drop unused index columns
        df = self._drop_unused(df)

        # 2. Rename to short codes
        df = self._rename(df)

        # 3. Malformed cells become missing; incomplete rows are dropped, no imputation
        malformed = 0
        for col in COLUMN_CODES:
            parsed = pd.to_numeric(df[col], errors="coerce")
            malformed += int((parsed.isna() & df[col].notna()).sum())
            df[col] = parsed
        if malformed:
            logger.warning("Found %d malformed cells; treating them as missing.", malformed)

        before = len(df)
        df = df.dropna(how="any")
        dropped = before - len(df)
        if dropped:
            logger.info("Dropped %d rows with missing or malformed values.", dropped)

        for col in CONTINUOUS + TARGETS:
            df[col] = df[col].astype(float)

        # 4. Categorical dtypes
        if self.categorical:
            df = self._cast_categoricals(df)

        df = df.reset_index(drop=True)
        logger.info("Preprocessing complete: %d rows × %d columns.", *df.shape)
        return df

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _drop_unused(df: pd.DataFrame) -> pd.DataFrame:
        """Drop ``Unnamed`` and entirely empty columns."""
        unused = [
            c
            for c in df.columns
            if str(c).startswith("Unnamed") or df[c].isna().all()
        ]
        if unused:
            logger.info("Dropping unused columns: %s", unused)
        return df.drop(columns=unused)

    @staticmethod
    def _rename(df: pd.DataFrame) -> pd.DataFrame:
        """Rename the ten data columns to short codes.

        Headers are matched case-insensitively against the known
        spellings; when they are not recognised the columns are taken
        positionally in source order.
        """
        if df.shape[1] != len(COLUMN_CODES):
            raise ValueError(
                f"Expected {len(COLUMN_CODES)} data columns after dropping "
                f"unused ones, found {df.shape[1]}: {list(df.columns)}"
            )

        normalised = [str(c).strip().lower() for c in df.columns]
        mapped = [_HEADER_MAP.get(c) for c in normalised]
        if sorted(m for m in mapped if m) == sorted(COLUMN_CODES):
            df.columns = mapped
            return df[COLUMN_CODES]

        logger.warning(
            "Unrecognised headers %s; renaming columns by position.",
            list(df.columns),
        )
        df.columns = COLUMN_CODES
        return df

    @staticmethod
    def _cast_categoricals(df: pd.DataFrame) -> pd.DataFrame:
        for col in ORDERED_CATEGORICALS:
            levels = sorted(df[col].unique())
            df[col] = pd.Categorical(df[col], categories=levels, ordered=True)
        for col in UNORDERED_CATEGORICALS:
            values = df[col].astype(int)
            df[col] = pd.Categorical(values, categories=sorted(values.unique()))
        return df
