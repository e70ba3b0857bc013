"""Entry point for the heating-load regression study.

Usage
-----
    python main.py                        # uses configs/config.yaml
    python main.py --config path/to.yaml
    python main.py --models ols_log tree  # select a subset of models
    python main.py --data path/to.csv     # override data path
    python main.py --no-report            # skip tables and figures

Pipeline steps
--------------
1. Load the raw CSV / Excel table.
2. Clean: drop unused columns and incomplete rows, rename to short codes.
3. Run data quality checks (schema, nulls, cardinality, VIF).
4. Draw the seeded 75/25 train/test partition once.
5. Evaluate every selected model specification on that partition.
6. Check tree-based models against the linear coefficient sign.
7. Print a comparison table and render the report.
"""

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
import yaml

import config as defaults

# ---------------------------------------------------------------------------
# Bootstrap logging before any local imports so module-level loggers work.
# ---------------------------------------------------------------------------


def _setup_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    fmt = fmt or "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO), format=fmt, force=True
    )


_setup_logging()  # default until config is loaded
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Local imports
# ---------------------------------------------------------------------------

from heatload.data.loader import EnergyDataIngestor  # noqa: E402
from heatload.data.partition import Partition, make_partition  # noqa: E402
from heatload.data.preprocessor import EnergyPreprocessor  # noqa: E402
from heatload.data.quality import DataQualityChecker  # noqa: E402
from heatload.evaluation.diagnostics import (  # noqa: E402
    SignCheck,
    coefficient_sign,
    residual_diagnostics,
    sign_consistency,
)
from heatload.evaluation.evaluator import EvaluationResult, ModelSpec, evaluate  # noqa: E402
from heatload.models.trainer import UnidentifiableModelError  # noqa: E402
from heatload.reporting.report import ReportWriter  # noqa: E402


# ---------------------------------------------------------------------------
# Config helpers
# ---------------------------------------------------------------------------


def load_config(path: str = "configs/config.yaml") -> dict:
    """Load YAML configuration file.

    Args:
        path: Path to the YAML config file.

    Returns:
        Parsed configuration dictionary.

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config not found: {cfg_path}")
    with open(cfg_path) as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def run_pipeline(
    config_path: str = "configs/config.yaml",
    data_path: Optional[str] = None,
    model_names: Optional[List[str]] = None,
    write_report: bool = True,
) -> Dict[str, EvaluationResult]:
    """Execute the full load → evaluate → report pipeline.

    Args:
        config_path: Path to the YAML configuration file.
        data_path: Override for the raw data path in the config.
        model_names: Model specifications to evaluate. Defaults to all
            entries of the ``models`` config section.
        write_report: Render tables, figures and ``report.md``.

    Returns:
        Successful evaluations keyed by model name. Specifications that
        hit a rank-deficient design are logged and left out.
    """
    # ------------------------------------------------------------------ #
    # 0. Config                                                           #
    # ------------------------------------------------------------------ #
    cfg = load_config(config_path)
    log_cfg = cfg.get("logging", {})
    _setup_logging(
        level=log_cfg.get("level", "INFO"),
        fmt=log_cfg.get("format"),
    )

    data_cfg = cfg.get("data", {})
    part_cfg = cfg.get("partition", {})
    model_cfg: dict = cfg.get("models", {})
    raw_path = data_path or data_cfg.get("raw_path")

    if model_names is None:
        model_names = list(model_cfg.keys())
    unknown = [m for m in model_names if m not in model_cfg]
    if unknown:
        raise ValueError(f"Models not defined in config: {unknown}")
    specs = [
        ModelSpec.from_config(name, {"target": defaults.TARGET, **model_cfg[name]})
        for name in model_names
    ]

    logger.info("Pipeline config: data=%s | models=%s", raw_path, model_names)

    # ------------------------------------------------------------------ #
    # 1–2. Load and clean                                                 #
    # ------------------------------------------------------------------ #
    df_raw = EnergyDataIngestor(raw_path).load(sheet_name=data_cfg.get("sheet_name", 0))
    dataset = EnergyPreprocessor().transform(df_raw)

    # ------------------------------------------------------------------ #
    # 3. Quality checks                                                   #
    # ------------------------------------------------------------------ #
    vif = DataQualityChecker().run_all(dataset)

    # ------------------------------------------------------------------ #
    # 4. Partition – fixed before any model is fit                        #
    # ------------------------------------------------------------------ #
    partition = make_partition(
        dataset,
        test_size=part_cfg.get("test_size", defaults.TEST_SIZE),
        random_state=part_cfg.get("random_state", defaults.RANDOM_STATE),
    )

    # ------------------------------------------------------------------ #
    # 5. Evaluate                                                         #
    # ------------------------------------------------------------------ #
    results: Dict[str, EvaluationResult] = {}
    failures: Dict[str, str] = {}
    for spec in specs:
        logger.info("=" * 60)
        try:
            result = evaluate(dataset, partition, spec)
        except UnidentifiableModelError as exc:
            logger.error("Skipping %s: %s", spec.name, exc)
            failures[spec.name] = str(exc)
            continue
        if spec.method == "ols":
            residual_diagnostics(result.trainer)
        results[spec.name] = result

    # ------------------------------------------------------------------ #
    # 6. Sign consistency                                                 #
    # ------------------------------------------------------------------ #
    sign_checks = _run_sign_checks(results, cfg.get("sign_checks"), dataset, partition)

    # ------------------------------------------------------------------ #
    # 7. Summary                                                          #
    # ------------------------------------------------------------------ #
    _print_summary(results)
    if write_report and results:
        rep_cfg = cfg.get("reporting", {})
        ReportWriter(
            rep_cfg.get("output_dir", "outputs/reports"),
            figures=rep_cfg.get("figures", True),
        ).write(results, failures=failures, vif=vif, sign_checks=sign_checks)
    return results


def _run_sign_checks(
    results: Dict[str, EvaluationResult],
    check_cfg: Optional[dict],
    dataset: pd.DataFrame,
    partition: Partition,
) -> Dict[str, SignCheck]:
    """Check every non-reference model against the reference OLS sign.

    Returns:
        Model name → :class:`SignCheck`; empty when not configured or the
        reference model is unavailable.
    """
    if not check_cfg:
        return {}
    if check_cfg.get("reference") not in results:
        logger.warning(
            "Reference model %r was not fitted; skipping sign checks.",
            check_cfg.get("reference"),
        )
        return {}
    reference = results[check_cfg["reference"]]
    feature = check_cfg.get("feature", "sa")
    sign = coefficient_sign(reference.trainer, feature)
    if sign == 0:
        logger.warning("Reference coefficient for '%s' is zero; skipping sign checks.", feature)
        return {}

    _, test = partition.split(dataset)
    checks: Dict[str, SignCheck] = {}
    for name, result in results.items():
        if name == check_cfg["reference"] or feature not in result.spec.predictors:
            continue
        checks[name] = sign_consistency(
            result.predict_load, test, feature, sign, float(check_cfg.get("step", 1.0))
        )
    return checks


def _print_summary(results: Dict[str, EvaluationResult]) -> None:
    """Print a formatted comparison of all model results.

    Args:
        results: Mapping returned by :func:`run_pipeline`.
    """
    if not results:
        logger.warning("No metrics to display.")
        return

    df = ReportWriter.comparison_table(results)
    logger.info("\n\n=== FINAL RESULTS ===\n%s\n", df.to_string())
    print("\n=== FINAL RESULTS ===")
    print(df.to_string())


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Heating-load regression study on the building energy dataset."
    )
    parser.add_argument(
        "--config",
        default="configs/config.yaml",
        help="Path to YAML config (default: configs/config.yaml).",
    )
    parser.add_argument(
        "--data",
        default=None,
        help="Override raw data path from config.",
    )
    parser.add_argument(
        "--models",
        nargs="+",
        default=None,
        help="Model specifications to evaluate (default: all in config).",
    )
    parser.add_argument(
        "--no-report",
        action="store_true",
        help="Skip writing tables, figures and report.md.",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = _parse_args()
    run_pipeline(
        config_path=args.config,
        data_path=args.data,
        model_names=args.models,
        write_report=not args.no_report,
    )
