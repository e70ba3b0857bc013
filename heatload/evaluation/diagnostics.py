"""Model diagnostics: collinearity, residual behaviour and sign consistency.

None of these raise on a "bad" finding; they return statistics and log
warnings so the analyst can pick another transform or predictor subset.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Sequence

import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy import stats
from statsmodels.stats.diagnostic import het_breuschpagan
from statsmodels.stats.outliers_influence import variance_inflation_factor

logger = logging.getLogger(__name__)

SIGNIFICANCE = 0.05


def variance_inflation(df: pd.DataFrame, columns: Sequence[str]) -> pd.Series:
    """Variance-inflation factor for each of ``columns``.

    Computed against an intercept plus the other listed columns. Exact
    linear dependencies give infinite (or numerically huge) values.

    Args:
        df: Data holding numeric ``columns``.
        columns: Columns to assess; needs at least two.

    Returns:
        Series of VIF values indexed by column name.
    """
    columns = list(columns)
    if len(columns) < 2:
        raise ValueError("VIF needs at least two columns.")
    X = sm.add_constant(df[columns].astype(float), has_constant="add").to_numpy()
    with np.errstate(divide="ignore"):
        vif = [variance_inflation_factor(X, i + 1) for i in range(len(columns))]
    return pd.Series(vif, index=columns, name="vif")


def residual_diagnostics(trainer) -> Dict[str, float]:
    """Normality and constant-variance tests on a fitted OLS trainer.

    Args:
        trainer: A fitted :class:`OLSTrainer` (or anything exposing a
            statsmodels ``results_``).

    Returns:
        Dict with ``shapiro_w``, ``shapiro_p``, ``breusch_pagan_lm`` and
        ``breusch_pagan_p``.
    """
    results = trainer.results_
    resid = np.asarray(results.resid, dtype=float)
    w, p_norm = stats.shapiro(resid)
    lm, p_het, _, _ = het_breuschpagan(resid, results.model.exog)
    out = {
        "shapiro_w": float(w),
        "shapiro_p": float(p_norm),
        "breusch_pagan_lm": float(lm),
        "breusch_pagan_p": float(p_het),
    }
    if p_norm < SIGNIFICANCE:
        logger.warning("Residuals depart from normality (Shapiro p=%.3g).", p_norm)
    if p_het < SIGNIFICANCE:
        logger.warning("Residuals are heteroskedastic (Breusch-Pagan p=%.3g).", p_het)
    return out


@dataclass(frozen=True)
class SignCheck:
    """Result of :func:`sign_consistency`."""

    feature: str
    expected_sign: int
    n_rows: int
    n_contradicting: int

    @property
    def share(self) -> float:
        return self.n_contradicting / self.n_rows if self.n_rows else 0.0

    @property
    def contradicts(self) -> bool:
        return self.n_contradicting > 0


def sign_consistency(
    predict: Callable[[pd.DataFrame], np.ndarray],
    frame: pd.DataFrame,
    feature: str,
    expected_sign: int,
    step: float,
) -> SignCheck:
    """Check that raising ``feature`` moves predictions the expected way.

    Every row of ``frame`` is paired with a copy whose ``feature`` is
    larger by ``step`` and otherwise identical. A row contradicts the
    expected sign when the prediction moves strictly the other way; flat
    responses do not count.

    Args:
        predict: Maps rows in the cleaned dataset schema to load
            predictions, e.g. :meth:`EvaluationResult.predict_load`.
        frame: Rows to perturb.
        feature: Continuous predictor to raise.
        expected_sign: ``+1`` or ``-1``, typically the sign of a linear
            model's coefficient for ``feature``.
        step: Positive increment added to ``feature``.

    Raises:
        ValueError: For a zero ``expected_sign`` or a non-positive ``step``.
    """
    if expected_sign not in (1, -1):
        raise ValueError(f"expected_sign must be +1 or -1, got {expected_sign}.")
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}.")

    raised = frame.copy()
    raised[feature] = raised[feature].astype(float) + step
    delta = np.asarray(predict(raised), dtype=float) - np.asarray(predict(frame), dtype=float)
    n_bad = int(np.sum(np.sign(delta) == -expected_sign))

    check = SignCheck(
        feature=feature,
        expected_sign=expected_sign,
        n_rows=len(frame),
        n_contradicting=n_bad,
    )
    if check.contradicts:
        logger.warning(
            "Predictions fall against the expected %s sign of '%s' for %d of %d rows.",
            "+" if expected_sign > 0 else "-",
            feature,
            n_bad,
            check.n_rows,
        )
    return check


def coefficient_sign(trainer, column: str) -> int:
    """Sign of a least-squares coefficient, ``0`` if exactly zero.

    Raises:
        KeyError: If ``column`` is not in the fitted model.
    """
    return int(np.sign(trainer.coefficients_.loc[column, "estimate"]))
