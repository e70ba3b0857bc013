"""End-to-end tests for main.run_pipeline."""

from pathlib import Path

import pytest
import yaml

import main
from heatload.data.partition import make_partition


@pytest.fixture()
def config_file(tmp_path: Path, raw_csv: Path) -> Path:
    cfg = {
        "data": {"raw_path": str(raw_csv)},
        "partition": {"test_size": 0.25, "random_state": 42},
        "logging": {"level": "WARNING"},
        "reporting": {"output_dir": str(tmp_path / "reports"), "figures": False},
        "models": {
            "ols_all": {"method": "ols", "predictors": ["rc", "sa", "wa", "ra", "oh"]},
            "ols_full": {"method": "ols", "predictors": ["rc", "sa", "wa", "oh", "ga"]},
            "ols_log": {
                "method": "ols",
                "target_transform": "log",
                "predictors": ["rc", "sa", "wa", "oh", "ga"],
                "log_predictors": ["rc", "sa", "wa"],
            },
            "tree": {
                "method": "tree",
                "predictors": ["rc", "sa", "wa", "ra", "oh", "ga"],
                "encoding": "ordinal",
            },
        },
        "sign_checks": {"reference": "ols_full", "feature": "sa", "step": 24.5},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(cfg))
    return path


class TestRunPipeline:
    def test_rank_deficient_model_skipped(self, config_file: Path, tmp_path: Path) -> None:
        results = main.run_pipeline(str(config_file))
        assert "ols_all" not in results
        assert {"ols_full", "ols_log", "tree"} <= set(results)
        report = (tmp_path / "reports" / "report.md").read_text(encoding="utf-8")
        assert "ols_all" in report

    def test_log_model_has_exceptional_predictive_power(self, config_file: Path) -> None:
        results = main.run_pipeline(str(config_file), model_names=["ols_log"], write_report=False)
        assert results["ols_log"].correlation > 0.95

    def test_all_models_share_one_partition(self, config_file: Path) -> None:
        results = main.run_pipeline(str(config_file), model_names=["ols_log", "tree"], write_report=False)
        assert list(results["ols_log"].pairs.index) == list(results["tree"].pairs.index)

    def test_unknown_model_name(self, config_file: Path) -> None:
        with pytest.raises(ValueError, match="not defined"):
            main.run_pipeline(str(config_file), model_names=["svm"])

    def test_missing_config(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config not found"):
            main.run_pipeline(str(tmp_path / "nope.yaml"))

    def test_cli_args(self) -> None:
        args = main._parse_args(["--models", "ols_log", "tree", "--no-report"])
        assert args.models == ["ols_log", "tree"]
        assert args.no_report
        assert args.config == "configs/config.yaml"


class TestShippedConfig:
    @pytest.fixture()
    def shipped_config(self, tmp_path: Path, raw_csv: Path) -> Path:
        cfg = main.load_config(str(Path(main.__file__).resolve().parent / "configs" / "config.yaml"))
        cfg["data"]["raw_path"] = str(raw_csv)
        cfg["logging"]["level"] = "WARNING"
        cfg["reporting"] = {"output_dir": str(tmp_path / "reports"), "figures": False}
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(cfg))
        return path

    def test_every_model_fits_and_sign_checks_run(self, shipped_config: Path, tmp_path: Path) -> None:
        results = main.run_pipeline(str(shipped_config))
        assert set(results) == set(main.load_config(str(shipped_config))["models"])
        report = (tmp_path / "reports" / "report.md").read_text(encoding="utf-8")
        assert "## Models not fitted" not in report
        assert "## Sign consistency" in report
        assert "- **tree**" in report


class TestRunSignChecks:
    def test_missing_reference_is_logged(self, dataset, caplog) -> None:
        partition = make_partition(dataset)
        with caplog.at_level("WARNING", logger="main"):
            checks = main._run_sign_checks({}, {"reference": "ols_full"}, dataset, partition)
        assert checks == {}
        assert "ols_full" in caplog.text

    def test_not_configured(self, dataset) -> None:
        assert main._run_sign_checks({}, None, dataset, make_partition(dataset)) == {}
