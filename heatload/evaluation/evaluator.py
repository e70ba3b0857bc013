"""Held-out evaluation of one model specification.

:func:`evaluate` is a one-shot function from (dataset, partition, model
specification) to an :class:`EvaluationResult`:

1. Split the dataset with the shared partition.
2. Fit predictor and target transforms on the training rows.
3. Build aligned design matrices for both folds.
4. Fit the trainer on the training fold only.
5. Predict the test fold and score predictions against truth on the
   transformed scale.

The dataset and partition are never modified.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

import numpy as np
import pandas as pd

from heatload.data.partition import Partition
from heatload.evaluation.metrics import compute_metrics
from heatload.features.design import DesignMatrixBuilder
from heatload.features.transforms import FeatureTransformer, TargetTransformer
from heatload.models.predictor import HeatLoadPredictor
from heatload.models.trainer import get_trainer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelSpec:
    """What to fit and how.

    Attributes:
        name: Label used in logs and reports.
        method: Trainer registry key (``ols``, ``subset``, ``lasso``,
            ``tree``, ``forest``, ``boost``).
        predictors: Predictor columns, in order.
        target: Target column. Defaults to heating load.
        target_transform: ``identity``, ``log`` or ``boxcox``.
        log_predictors: Predictors replaced by their natural log.
        encoding: Categorical encoding, ``dummy`` or ``ordinal``.
        params: Keyword arguments for the trainer.
    """

    name: str
    method: str
    predictors: Tuple[str, ...]
    target: str = "hl"
    target_transform: str = "identity"
    log_predictors: Tuple[str, ...] = ()
    encoding: str = "dummy"
    params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(cls, name: str, cfg: Mapping[str, Any]) -> "ModelSpec":
        """Build a model specification from one entry of the ``models`` config section.

        Raises:
            ValueError: If ``method`` or ``predictors`` is missing.
        """
        missing = [k for k in ("method", "predictors") if k not in cfg]
        if missing:
            raise ValueError(f"Model '{name}' config is missing keys: {missing}")
        return cls(
            name=name,
            method=cfg["method"],
            predictors=tuple(cfg["predictors"]),
            target=cfg.get("target", "hl"),
            target_transform=cfg.get("target_transform", "identity"),
            log_predictors=tuple(cfg.get("log_predictors", ())),
            encoding=cfg.get("encoding", "dummy"),
            params=dict(cfg.get("params") or {}),
        )


@dataclass
class EvaluationResult:
    """Outcome of :func:`evaluate` for one specification.

    ``pairs`` holds predicted/actual values on the scale the error was
    computed on; ``load_pairs`` holds the same rows back-transformed to
    the original load scale for plotting and reporting.
    """

    spec: ModelSpec
    mse: float
    correlation: float
    pairs: pd.DataFrame
    load_pairs: pd.DataFrame
    metrics: Dict[str, float]
    trainer: Any
    feature_transformer: FeatureTransformer
    design: DesignMatrixBuilder
    predictor: HeatLoadPredictor

    @property
    def n_test(self) -> int:
        return len(self.pairs)

    def predict_load(self, df: pd.DataFrame) -> np.ndarray:
        """Predict the load for rows given in the cleaned dataset schema."""
        X = self.design.transform(self.feature_transformer.transform(df))
        return self.predictor.predict_load(X)


def evaluate(dataset: pd.DataFrame, partition: Partition, spec: ModelSpec) -> EvaluationResult:
    """Fit ``spec`` on the training rows and score it on the test rows.

    Args:
        dataset: Cleaned dataset (output of :class:`EnergyPreprocessor`).
        partition: Shared train/test partition.
        spec: Model specification.

    Returns:
        :class:`EvaluationResult` with MSE, correlation and prediction pairs.

    Raises:
        UnidentifiableModelError: If a least-squares family meets a
            rank-deficient training design.
        ValueError: For unknown methods, transforms or encodings.
    """
    logger.info("Evaluating %s (%s)", spec.name, spec.method)
    train, test = partition.split(dataset)

    feature_tf = FeatureTransformer(log_columns=spec.log_predictors).fit(train)
    train_t = feature_tf.transform(train)
    test_t = feature_tf.transform(test)

    design = DesignMatrixBuilder(predictors=spec.predictors, encoding=spec.encoding)
    design.fit(train_t)
    X_train = design.transform(train_t)
    X_test = design.transform(test_t)

    target_tf = TargetTransformer(method=spec.target_transform).fit(train[spec.target])
    y_train = target_tf.transform(train[spec.target])
    y_test = target_tf.transform(test[spec.target])

    trainer = get_trainer(spec.method, **spec.params)
    if spec.method == "subset":
        trainer.set_params(terms=design.terms_)
    trainer.fit(X_train, y_train)

    predictor = HeatLoadPredictor(trainer, target_tf)
    preds = predictor.predict_dataframe(X_test)
    y_pred = preds["predicted_transformed"].to_numpy()
    metrics = compute_metrics(y_test, y_pred, label=spec.name)

    pairs = pd.DataFrame({"predicted": y_pred, "actual": y_test}, index=X_test.index)
    load_pairs = pd.DataFrame(
        {
            "predicted": preds["predicted_load"].to_numpy(),
            "actual": test[spec.target].to_numpy(dtype=float),
        },
        index=X_test.index,
    )

    return EvaluationResult(
        spec=spec,
        mse=metrics["mse"],
        correlation=metrics["pearson_r"],
        pairs=pairs,
        load_pairs=load_pairs,
        metrics=metrics,
        trainer=trainer,
        feature_transformer=feature_tf,
        design=design,
        predictor=predictor,
    )
