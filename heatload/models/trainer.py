"""Model training classes for heating-load regression.

Each trainer wraps a specific algorithm with a consistent
``fit`` / ``predict`` interface so one evaluator can drive them all.
Trainers see a numeric design matrix (see
:class:`heatload.features.design.DesignMatrixBuilder`) and a target that
is already on its transformed scale; back-transformation is handled by
:mod:`heatload.models.predictor`.

Available trainers:
    - :class:`OLSTrainer`       – ordinary least squares (statsmodels).
    - :class:`SubsetOLSTrainer` – exhaustive best-subset least squares.
    - :class:`LassoTrainer`     – L1-penalised least squares.
    - :class:`TreeTrainer`      – regression tree, optionally CV-pruned.
    - :class:`ForestTrainer`    – random forest.
    - :class:`BoostTrainer`     – LightGBM gradient boosting.
"""

import itertools
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.ensemble import RandomForestRegressor
from sklearn.linear_model import Lasso, LassoCV
from sklearn.model_selection import KFold, cross_val_score
from sklearn.preprocessing import StandardScaler
from sklearn.tree import DecisionTreeRegressor

logger = logging.getLogger(__name__)


class UnidentifiableModelError(ValueError):
    """Raised when the design matrix is rank deficient.

    Attributes:
        aliased: Design columns that are exact linear combinations of the
            columns before them (including the intercept).
    """

    def __init__(self, aliased: Sequence[str]) -> None:
        self.aliased = list(aliased)
        super().__init__(
            "Unidentifiable model: design matrix is rank deficient; "
            f"aliased columns {self.aliased}. Drop them and refit."
        )


def find_aliased_columns(design: pd.DataFrame) -> List[str]:
    """Return columns that add no rank to the columns preceding them.

    Columns are scanned left to right, so with an intercept first a
    constant column, or the last member of an exact dependency, is the
    one reported.
    """
    values = design.to_numpy(dtype=float)
    kept: List[int] = []
    aliased: List[str] = []
    for j, name in enumerate(design.columns):
        candidate = kept + [j]
        if np.linalg.matrix_rank(values[:, candidate]) == len(candidate):
            kept.append(j)
        else:
            aliased.append(str(name))
    return aliased


def _as_frame(X: Union[pd.DataFrame, np.ndarray]) -> pd.DataFrame:
    if isinstance(X, pd.DataFrame):
        return X
    X = np.asarray(X, dtype=float)
    return pd.DataFrame(X, columns=[f"x{i}" for i in range(X.shape[1])])


# ---------------------------------------------------------------------------
# Ordinary least squares
# ---------------------------------------------------------------------------


class OLSTrainer(BaseEstimator, RegressorMixin):
    """Ordinary least squares with an intercept.

    The design is checked for exact linear dependencies before fitting;
    a rank-deficient design raises :class:`UnidentifiableModelError`
    instead of returning undefined coefficients.
    """

    def fit(self, X_train: pd.DataFrame, y_train: np.ndarray) -> "OLSTrainer":
        """Fit the least-squares model.

        Args:
            X_train: Training design matrix (no intercept column).
            y_train: Training target, transformed scale.

        Returns:
            Fitted trainer (self).

        Raises:
            UnidentifiableModelError: If the design is rank deficient.
        """
        X_train = _as_frame(X_train)
        design = sm.add_constant(X_train, has_constant="add")
        aliased = find_aliased_columns(design)
        if aliased:
            logger.error("Rank-deficient design; aliased columns: %s", aliased)
            raise UnidentifiableModelError(aliased)

        self.feature_names_: List[str] = list(X_train.columns)
        self.results_ = sm.OLS(np.asarray(y_train, dtype=float), design).fit()
        self.coefficients_ = pd.DataFrame(
            {
                "estimate": self.results_.params,
                "std_error": self.results_.bse,
                "t_value": self.results_.tvalues,
                "p_value": self.results_.pvalues,
            }
        )
        self.rsquared_ = float(self.results_.rsquared)
        self.adj_rsquared_ = float(self.results_.rsquared_adj)
        logger.info(
            "OLS trained on %d columns: R²=%.4f, adj. R²=%.4f.",
            len(self.feature_names_),
            self.rsquared_,
            self.adj_rsquared_,
        )
        return self

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        X = _as_frame(X)[self.feature_names_]
        design = sm.add_constant(X, has_constant="add")
        return np.asarray(self.results_.predict(design), dtype=float)

    @property
    def resid_(self) -> np.ndarray:
        return np.asarray(self.results_.resid, dtype=float)

    @property
    def fitted_(self) -> np.ndarray:
        return np.asarray(self.results_.fittedvalues, dtype=float)


# ---------------------------------------------------------------------------
# Best-subset least squares
# ---------------------------------------------------------------------------

_SUBSET_CRITERIA = ("bic", "aic", "adjr2")


class SubsetOLSTrainer(BaseEstimator, RegressorMixin):
    """Exhaustive best-subset selection followed by an OLS refit.

    Subsets are formed from predictor *terms*; a categorical predictor's
    indicator columns enter or leave together. Rank-deficient subsets are
    skipped during the search.

    Args:
        criterion: ``"bic"``, ``"aic"`` or ``"adjr2"``.
        max_terms: Largest subset size considered (default: all terms).
        terms: Mapping of term name to its design columns. When ``None``
            every design column is its own term.
    """

    def __init__(
        self,
        criterion: str = "bic",
        max_terms: Optional[int] = None,
        terms: Optional[Dict[str, List[str]]] = None,
    ) -> None:
        self.criterion = criterion
        self.max_terms = max_terms
        self.terms = terms

    def fit(self, X_train: pd.DataFrame, y_train: np.ndarray) -> "SubsetOLSTrainer":
        """Search all term subsets and refit the best one.

        Returns:
            Fitted trainer (self).

        Raises:
            ValueError: For an unknown criterion or when no subset is
                identifiable.
        """
        if self.criterion not in _SUBSET_CRITERIA:
            raise ValueError(
                f"Unknown criterion '{self.criterion}'. Choose from: {list(_SUBSET_CRITERIA)}"
            )
        X_train = _as_frame(X_train)
        y = np.asarray(y_train, dtype=float)
        terms = self.terms or {c: [c] for c in X_train.columns}
        names = list(terms)
        max_terms = min(self.max_terms or len(names), len(names))

        rows = []
        best_score, best_subset = np.inf, None
        for k in range(1, max_terms + 1):
            best_k = None
            for subset in itertools.combinations(names, k):
                cols = [c for t in subset for c in terms[t]]
                design = sm.add_constant(X_train[cols], has_constant="add")
                if find_aliased_columns(design):
                    logger.debug("Skipping rank-deficient subset %s", subset)
                    continue
                res = sm.OLS(y, design).fit()
                score = self._score(res)
                if best_k is None or score < best_k[0]:
                    best_k = (score, subset, res)
            if best_k is None:
                continue
            score, subset, res = best_k
            rows.append(
                {
                    "n_terms": k,
                    "terms": ", ".join(subset),
                    "bic": res.bic,
                    "aic": res.aic,
                    "adjr2": res.rsquared_adj,
                }
            )
            if score < best_score:
                best_score, best_subset = score, subset

        if best_subset is None:
            raise ValueError("No identifiable predictor subset found.")

        self.path_ = pd.DataFrame(rows).set_index("n_terms")
        self.selected_terms_: List[str] = list(best_subset)
        self.selected_columns_: List[str] = [
            c for t in best_subset for c in terms[t]
        ]
        logger.info(
            "Best subset by %s: %s", self.criterion, self.selected_terms_
        )
        self.model_ = OLSTrainer().fit(X_train[self.selected_columns_], y)
        return self

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        return self.model_.predict(_as_frame(X)[self.selected_columns_])

    @property
    def coefficients_(self) -> pd.DataFrame:
        return self.model_.coefficients_

    @property
    def results_(self):
        return self.model_.results_

    def _score(self, res) -> float:
        if self.criterion == "bic":
            return float(res.bic)
        if self.criterion == "aic":
            return float(res.aic)
        return -float(res.rsquared_adj)


# ---------------------------------------------------------------------------
# LASSO
# ---------------------------------------------------------------------------


class LassoTrainer(BaseEstimator, RegressorMixin):
    """L1-penalised least squares with standard scaling.

    Features are z-score scaled before fitting because the penalty is
    sensitive to feature magnitude.

    Args:
        alpha: Fixed penalty weight. When ``None`` the weight is chosen
            by K-fold cross-validation (``LassoCV``).
        cv: Number of folds for the cross-validated penalty.
        max_iter: Coordinate-descent iteration limit.
    """

    def __init__(
        self,
        alpha: Optional[float] = None,
        cv: int = 10,
        max_iter: int = 10000,
    ) -> None:
        self.alpha = alpha
        self.cv = cv
        self.max_iter = max_iter

    def fit(self, X_train: pd.DataFrame, y_train: np.ndarray) -> "LassoTrainer":
        X_train = _as_frame(X_train)
        self.feature_names_: List[str] = list(X_train.columns)
        self.scaler_ = StandardScaler()
        X_scaled = self.scaler_.fit_transform(X_train)
        if self.alpha is None:
            self.model_ = LassoCV(cv=self.cv, max_iter=self.max_iter)
        else:
            self.model_ = Lasso(alpha=self.alpha, max_iter=self.max_iter)
        self.model_.fit(X_scaled, np.asarray(y_train, dtype=float))
        self.alpha_ = float(getattr(self.model_, "alpha_", self.alpha))
        logger.info(
            "Lasso trained with alpha=%.6f; %d of %d coefficients zeroed.",
            self.alpha_,
            len(self.zeroed_),
            len(self.feature_names_),
        )
        return self

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        X_scaled = self.scaler_.transform(_as_frame(X)[self.feature_names_])
        return self.model_.predict(X_scaled)

    @property
    def coefficients_(self) -> pd.Series:
        """Standardised coefficients indexed by design column."""
        return pd.Series(self.model_.coef_, index=self.feature_names_)

    @property
    def zeroed_(self) -> List[str]:
        coef = self.coefficients_
        return list(coef[coef == 0].index)


# ---------------------------------------------------------------------------
# Regression tree
# ---------------------------------------------------------------------------


class TreeTrainer(BaseEstimator, RegressorMixin):
    """Recursive-partitioning regression tree.

    With ``prune=True`` the cost-complexity penalty is chosen by K-fold
    cross-validation over the full tree's pruning path; among penalties
    with the lowest CV error the largest (smallest tree) wins.

    Args:
        max_depth: Maximum tree depth (``None`` = unlimited).
        min_samples_split: Minimum node size eligible for a split.
        min_samples_leaf: Minimum observations in a leaf.
        prune: Enable cross-validated cost-complexity pruning.
        cv: Folds for the pruning search.
        random_state: Seed for fold shuffling and tie-breaking.
    """

    def __init__(
        self,
        max_depth: Optional[int] = None,
        min_samples_split: int = 10,
        min_samples_leaf: int = 5,
        prune: bool = False,
        cv: int = 10,
        random_state: int = 42,
    ) -> None:
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf
        self.prune = prune
        self.cv = cv
        self.random_state = random_state

    def _tree(self, ccp_alpha: float = 0.0) -> DecisionTreeRegressor:
        return DecisionTreeRegressor(
            max_depth=self.max_depth,
            min_samples_split=self.min_samples_split,
            min_samples_leaf=self.min_samples_leaf,
            ccp_alpha=ccp_alpha,
            random_state=self.random_state,
        )

    def fit(self, X_train: pd.DataFrame, y_train: np.ndarray) -> "TreeTrainer":
        X_train = _as_frame(X_train)
        y = np.asarray(y_train, dtype=float)
        self.ccp_alpha_ = 0.0
        if self.prune:
            self.ccp_alpha_ = self._select_alpha(X_train, y)

        self.model_ = self._tree(self.ccp_alpha_).fit(X_train, y)
        self.n_leaves_ = int(self.model_.get_n_leaves())
        logger.info(
            "Tree trained: %d leaves, depth %d, ccp_alpha=%.6f.",
            self.n_leaves_,
            self.model_.get_depth(),
            self.ccp_alpha_,
        )
        return self

    def _select_alpha(self, X: pd.DataFrame, y: np.ndarray) -> float:
        path = self._tree().cost_complexity_pruning_path(X, y)
        alphas = np.unique(np.clip(path.ccp_alphas, 0.0, None))
        folds = KFold(n_splits=self.cv, shuffle=True, random_state=self.random_state)
        cv_mse = np.array(
            [
                -cross_val_score(
                    self._tree(a), X, y, cv=folds, scoring="neg_mean_squared_error"
                ).mean()
                for a in alphas
            ]
        )
        self.cv_path_ = pd.DataFrame({"ccp_alpha": alphas, "cv_mse": cv_mse})
        best = np.flatnonzero(np.isclose(cv_mse, cv_mse.min()))
        alpha = float(alphas[best[-1]])
        logger.info(
            "Pruning: %d candidate penalties, chose %.6f (CV MSE %.4f).",
            len(alphas),
            alpha,
            cv_mse.min(),
        )
        return alpha

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        return self.model_.predict(_as_frame(X))

    @property
    def feature_importances_(self) -> pd.Series:
        return pd.Series(
            self.model_.feature_importances_, index=self.model_.feature_names_in_
        ).sort_values(ascending=False)


# ---------------------------------------------------------------------------
# Random forest
# ---------------------------------------------------------------------------


class ForestTrainer(BaseEstimator, RegressorMixin):
    """Bootstrap-aggregated regression trees with feature subsampling.

    Args:
        n_estimators: Number of trees.
        max_features: Features considered per split (fraction or count).
        min_samples_leaf: Minimum observations in a leaf.
        random_state: Random seed for reproducibility.
    """

    def __init__(
        self,
        n_estimators: int = 500,
        max_features: Union[float, int, str] = 1.0 / 3.0,
        min_samples_leaf: int = 5,
        random_state: int = 42,
    ) -> None:
        self.n_estimators = n_estimators
        self.max_features = max_features
        self.min_samples_leaf = min_samples_leaf
        self.random_state = random_state

    def fit(self, X_train: pd.DataFrame, y_train: np.ndarray) -> "ForestTrainer":
        self.model_ = RandomForestRegressor(
            n_estimators=self.n_estimators,
            max_features=self.max_features,
            min_samples_leaf=self.min_samples_leaf,
            bootstrap=True,
            oob_score=True,
            random_state=self.random_state,
        )
        self.model_.fit(_as_frame(X_train), np.asarray(y_train, dtype=float))
        logger.info(
            "Random forest trained: %d trees, OOB R²=%.4f.",
            self.n_estimators,
            self.model_.oob_score_,
        )
        return self

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        return self.model_.predict(_as_frame(X))

    @property
    def feature_importances_(self) -> pd.Series:
        return pd.Series(
            self.model_.feature_importances_, index=self.model_.feature_names_in_
        ).sort_values(ascending=False)


# ---------------------------------------------------------------------------
# LightGBM
# ---------------------------------------------------------------------------


class BoostTrainer(BaseEstimator, RegressorMixin):
    """LightGBM gradient-boosting regressor.

    A sequentially fitted tree ensemble, kept alongside the bagged
    forest for comparison. Runs single-threaded with a fixed seed.

    Args:
        n_estimators: Number of boosting rounds.
        learning_rate: Step size shrinkage.
        num_leaves: Maximum number of leaves per tree.
        min_child_samples: Minimum data points in a leaf.
        subsample: Row sub-sampling ratio per round.
        colsample_bytree: Feature sub-sampling ratio per tree.
        random_state: Random seed for reproducibility.
        extra_params: Additional keyword arguments forwarded to the
            LightGBM ``LGBMRegressor``.
    """

    def __init__(
        self,
        n_estimators: int = 500,
        learning_rate: float = 0.05,
        num_leaves: int = 15,
        min_child_samples: int = 10,
        subsample: float = 0.8,
        colsample_bytree: float = 1.0,
        random_state: int = 42,
        extra_params: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.n_estimators = n_estimators
        self.learning_rate = learning_rate
        self.num_leaves = num_leaves
        self.min_child_samples = min_child_samples
        self.subsample = subsample
        self.colsample_bytree = colsample_bytree
        self.random_state = random_state
        self.extra_params = extra_params

    def fit(self, X_train: pd.DataFrame, y_train: np.ndarray) -> "BoostTrainer":
        import lightgbm as lgb  # lazy import to avoid hard dependency at module load

        params: Dict[str, Any] = dict(
            n_estimators=self.n_estimators,
            learning_rate=self.learning_rate,
            num_leaves=self.num_leaves,
            min_child_samples=self.min_child_samples,
            subsample=self.subsample,
            subsample_freq=1 if self.subsample < 1.0 else 0,
            colsample_bytree=self.colsample_bytree,
            random_state=self.random_state,
            n_jobs=1,
            verbosity=-1,
            **(self.extra_params or {}),
        )
        self.model_ = lgb.LGBMRegressor(**params)
        self.model_.fit(_as_frame(X_train), np.asarray(y_train, dtype=float))
        logger.info("LightGBM trained: %d rounds.", self.n_estimators)
        return self

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        return self.model_.predict(_as_frame(X))

    @property
    def feature_importances_(self) -> pd.Series:
        """Return split-count importances as a sorted Series."""
        return pd.Series(
            self.model_.feature_importances_,
            index=self.model_.feature_name_,
        ).sort_values(ascending=False)


# ---------------------------------------------------------------------------
# Registry helper
# ---------------------------------------------------------------------------

_TRAINER_REGISTRY: Dict[str, type] = {
    "ols": OLSTrainer,
    "subset": SubsetOLSTrainer,
    "lasso": LassoTrainer,
    "tree": TreeTrainer,
    "forest": ForestTrainer,
    "boost": BoostTrainer,
}


def get_trainer(name: str, **kwargs: Any) -> Any:
    """Instantiate a trainer by name.

    Args:
        name: One of ``"ols"``, ``"subset"``, ``"lasso"``, ``"tree"``,
            ``"forest"`` or ``"boost"``.
        **kwargs: Passed to the trainer's constructor.

    Returns:
        Instantiated (unfitted) trainer.

    Raises:
        ValueError: If ``name`` is not in the registry.
    """
    if name not in _TRAINER_REGISTRY:
        raise ValueError(
            f"Unknown trainer '{name}'. Choose from: {list(_TRAINER_REGISTRY)}"
        )
    return _TRAINER_REGISTRY[name](**kwargs)
