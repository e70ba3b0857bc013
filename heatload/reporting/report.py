"""Render the model comparison as CSV tables, figures and a Markdown report.

Output layout under ``output_dir``::

    report.md
    model_comparison.csv
    vif.csv
    coefficients_<model>.csv      # least-squares and LASSO models
    importance_<model>.csv        # tree-based models
    figures/<model>_pred_vs_actual.png
    figures/<model>_residuals.png # least-squares models
    figures/<model>_importance.png # tree-based models
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from heatload.evaluation.diagnostics import SignCheck
from heatload.evaluation.evaluator import EvaluationResult
from heatload.evaluation.metrics import metrics_to_dataframe
from heatload.reporting import plots

logger = logging.getLogger(__name__)


def _block(df: Union[pd.DataFrame, pd.Series]) -> str:
    return "```text\n" + df.to_string() + "\n```\n"


class ReportWriter:
    """Write every report artefact for one pipeline run.

    Args:
        output_dir: Directory to write into; created if missing.
        figures: Render PNG charts when ``True``.
    """

    def __init__(self, output_dir: Union[str, Path], figures: bool = True) -> None:
        self.output_dir = Path(output_dir)
        self.figures = figures

    def write(
        self,
        results: Dict[str, EvaluationResult],
        failures: Optional[Dict[str, str]] = None,
        vif: Optional[pd.Series] = None,
        sign_checks: Optional[Dict[str, SignCheck]] = None,
    ) -> Path:
        """Write tables, figures and ``report.md``.

        Args:
            results: Successful evaluations keyed by model name.
            failures: Model name → error message for skipped models.
            vif: Variance-inflation table from the quality checks.
            sign_checks: Model name → sign-consistency outcome.

        Returns:
            Path to the written ``report.md``.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        failures = failures or {}
        sign_checks = sign_checks or {}
        lines: List[str] = ["# Heating-load model comparison", ""]

        comparison = self.comparison_table(results)
        comparison.to_csv(self.output_dir / "model_comparison.csv")
        lines += [
            "## Held-out performance",
            "",
            "Errors are on each model's fitted target scale; "
            "`pearson_r` is comparable across models.",
            "",
            _block(comparison),
        ]

        if failures:
            lines += ["## Models not fitted", ""]
            lines += [f"- **{name}**: {msg}" for name, msg in failures.items()]
            lines.append("")

        if vif is not None:
            vif.to_csv(self.output_dir / "vif.csv")
            lines += ["## Collinearity", "", _block(vif)]

        if sign_checks:
            lines += ["## Sign consistency", ""]
            for name, check in sign_checks.items():
                verdict = "contradicts" if check.contradicts else "agrees with"
                lines.append(
                    f"- **{name}** {verdict} the linear sign of `{check.feature}` "
                    f"({check.n_contradicting}/{check.n_rows} rows against)."
                )
            lines.append("")

        for name, result in results.items():
            lines += self._model_section(name, result)

        path = self.output_dir / "report.md"
        path.write_text("\n".join(lines), encoding="utf-8")
        logger.info("Report written to %s", path)
        return path

    @staticmethod
    def comparison_table(results: Dict[str, EvaluationResult]) -> pd.DataFrame:
        table = metrics_to_dataframe({n: r.metrics for n, r in results.items()})
        if table.empty:
            return table
        table.insert(0, "target_scale", [r.spec.target_transform for r in results.values()])
        return table.sort_values("pearson_r", ascending=False)

    def _model_section(self, name: str, result: EvaluationResult) -> List[str]:
        spec = result.spec
        lines = [
            f"## {name}",
            "",
            f"- method: `{spec.method}`",
            f"- target: `{spec.target}` ({spec.target_transform})",
            f"- predictors: {', '.join(spec.predictors)}",
        ]
        if spec.log_predictors:
            lines.append(f"- log predictors: {', '.join(spec.log_predictors)}")
        lines.append("")

        trainer = result.trainer
        table = None
        if hasattr(trainer, "coefficients_"):
            table = trainer.coefficients_
            table.to_csv(self.output_dir / f"coefficients_{name}.csv")
        elif hasattr(trainer, "feature_importances_"):
            table = trainer.feature_importances_
            table.to_csv(self.output_dir / f"importance_{name}.csv")
        if table is not None:
            lines.append(_block(table))

        if self.figures:
            fig = plots.plot_predicted_vs_actual(
                result.load_pairs, title=f"{name}: predicted vs actual"
            )
            img = plots.save_figure(fig, self.output_dir / "figures" / f"{name}_pred_vs_actual.png")
            lines.append(f"![{name} predicted vs actual](figures/{img.name})")
            if hasattr(trainer, "results_"):
                fig = plots.plot_residuals(
                    trainer.results_.fittedvalues, trainer.results_.resid,
                    title=f"{name}: residuals vs fitted",
                )
                img = plots.save_figure(fig, self.output_dir / "figures" / f"{name}_residuals.png")
                lines.append(f"![{name} residuals](figures/{img.name})")
            elif hasattr(trainer, "feature_importances_"):
                fig = plots.plot_feature_importance(
                    trainer.feature_importances_, title=f"{name}: importance"
                )
                img = plots.save_figure(fig, self.output_dir / "figures" / f"{name}_importance.png")
                lines.append(f"![{name} importance](figures/{img.name})")
            lines.append("")
        return lines
