"""Data quality checks for the building energy-efficiency dataset."""

import logging
from typing import List

import pandas as pd

from heatload.data.preprocessor import COLUMN_CODES, CONTINUOUS
from heatload.evaluation.diagnostics import variance_inflation

logger = logging.getLogger(__name__)

# VIF above this is reported as a collinearity warning.
VIF_WARN_THRESHOLD = 10.0


class DataQualityChecker:
    """Runs schema validation and data quality reports on a DataFrame.

    These methods are stateless – they inspect the data and raise/log
    issues without fitting any parameters for later use.
    """

    # Columns that must be present in the cleaned dataset.
    REQUIRED_COLUMNS: List[str] = COLUMN_CODES

    def validate_schema(self, df: pd.DataFrame) -> None:
        """Assert that all required columns are present.

        Args:
            df: Cleaned DataFrame (output of :class:`EnergyPreprocessor`).

        Raises:
            ValueError: If any required column is missing.
        """
        missing = [c for c in self.REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(
                f"DataFrame is missing required columns: {missing}"
            )
        logger.info("Schema validation passed – all required columns present.")

    def report_nulls(self, df: pd.DataFrame, top_n: int = 20) -> pd.DataFrame:
        """Return a summary of missing-value rates per column.

        Args:
            df: DataFrame to inspect.
            top_n: Number of columns with the most nulls to log.

        Returns:
            DataFrame with columns ``missing_count`` and ``missing_pct``,
            sorted descending by ``missing_pct``.
        """
        summary = pd.DataFrame(
            {
                "missing_count": df.isnull().sum(),
                "missing_pct": df.isnull().mean() * 100,
            }
        ).sort_values("missing_pct", ascending=False)

        high_null = summary[summary["missing_pct"] > 0].head(top_n)
        if not high_null.empty:
            logger.info(
                "Top-%d columns by missing rate:\n%s", top_n, high_null.to_string()
            )
        return summary

    def report_cardinality(self, df: pd.DataFrame) -> pd.DataFrame:
        """Return level counts for the categorical columns.

        Args:
            df: DataFrame to inspect.

        Returns:
            DataFrame with columns ``ordered`` and ``n_levels``, one row per
            categorical column.
        """
        cat_cols = df.select_dtypes(include=["category"]).columns
        summary = pd.DataFrame(
            {
                "ordered": [bool(df[c].cat.ordered) for c in cat_cols],
                "n_levels": [len(df[c].cat.categories) for c in cat_cols],
            },
            index=cat_cols,
        )
        logger.info("Cardinality report:\n%s", summary.to_string())
        return summary

    def report_collinearity(self, df: pd.DataFrame) -> pd.Series:
        """Log variance-inflation factors for the continuous attributes.

        Exact linear dependencies (surface area is wall area plus twice
        the roof area) show up as infinite VIF.

        Args:
            df: Cleaned DataFrame.

        Returns:
            Series of VIF values indexed by column.
        """
        vif = variance_inflation(df, CONTINUOUS)
        logger.info("Variance-inflation factors:\n%s", vif.to_string())
        high = vif[vif > VIF_WARN_THRESHOLD]
        if not high.empty:
            logger.warning(
                "High collinearity (VIF > %.0f): %s",
                VIF_WARN_THRESHOLD,
                list(high.index),
            )
        return vif

    def run_all(self, df: pd.DataFrame) -> pd.Series:
        """Run all quality checks and log results.

        Args:
            df: Cleaned DataFrame to check.

        Returns:
            The VIF table from :meth:`report_collinearity`.
        """
        self.validate_schema(df)
        self.report_nulls(df)
        self.report_cardinality(df)
        vif = self.report_collinearity(df)
        logger.info("All quality checks complete.")
        return vif
