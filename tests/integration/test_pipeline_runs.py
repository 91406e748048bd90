import json
from pathlib import Path

import pytest

from nnscope.serialization import load_model
from nnscope.training import pipelines


def _config(tmp_path, **train):
    config = {
        "data": {"name": "sine", "n_points": 12},
        "model": {"hidden": [4], "activation": "tanh", "init": "xavier"},
        "train": {
            "optimizer": "adam",
            "lr": 0.01,
            "loss": "mse",
            "epochs": 6,
            "seed": 4,
            "run_dir": str(tmp_path / "run"),
            "enable_plots": False,
        },
    }
    config["train"].update(train)
    return config


def test_pipeline_writes_all_artifacts(tmp_path):
    result = pipelines.run_pipeline(_config(tmp_path))
    run_dir = tmp_path / "run"
    for name in (
        "metrics.jsonl",
        "metrics.csv",
        "metrics_final.json",
        "model.json",
        "config.json",
        "manifest.json",
        "summary.json",
    ):
        assert (run_dir / name).exists(), name
    assert not (run_dir / "loss.png").exists()
    assert result.epochs == 6

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines() if line]
    assert [r["epoch"] for r in records] == list(range(1, 7))
    assert all({"loss", "weight_mean", "gradient_mean", "seed", "sha"} <= set(r) for r in records)
    assert records[-1]["loss"] == result.final_loss

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["model"]["layers"] == [1, 4, 1]
    assert manifest["network"]["parameters"] == 13

    final = json.loads((run_dir / "metrics_final.json").read_text())
    assert {"mse", "mae", "r2", "accuracy", "f1"} <= set(final)

    network = load_model(result.model_path)
    assert network.epoch == 6
    assert network.architecture == (1, 4, 1)


def test_target_loss_stops_early(tmp_path):
    result = pipelines.run_pipeline(_config(tmp_path, epochs=50, target_loss=1e6))
    assert result.epochs == 1


def test_compare_preset_runs_both_variants(tmp_path):
    config = json.loads(json.dumps(pipelines.load_preset("sgd-vs-adam-gaussian")))
    config = pipelines.merge_config(config, {"train": {"epochs": 3, "run_dir": str(tmp_path)}})
    baseline, variant = pipelines.run_pipeline(config)
    assert Path(baseline.metrics_path).parent == tmp_path / "baseline"
    assert Path(variant.metrics_path).parent == tmp_path / "variant"
    assert load_model(baseline.model_path).optimizer_name == "sgd"
    assert load_model(variant.model_path).optimizer_name == "adam"


def test_run_root_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("NNSCOPE_RUN_ROOT", str(tmp_path / "root"))
    config = _config(tmp_path)
    del config["train"]["run_dir"]
    result = pipelines.run_pipeline(config)
    assert Path(result.metrics_path).is_relative_to(tmp_path / "root")
    assert Path(result.metrics_path).parent.name == "adam"


def test_presets_include_yaml_files():
    available = pipelines.presets()
    assert "gabor-gelu-adam" in available
    assert available["gabor-gelu-adam"]["model"]["activation"] == "gelu"
    for name, config in available.items():
        assert {"data", "model", "train"} <= set(config), name


def test_layers_must_match_data(tmp_path):
    config = _config(tmp_path)
    config["model"] = {"layers": [2, 4, 1], "activation": "tanh"}
    with pytest.raises(ValueError, match="do not match"):
        pipelines.run_pipeline(config)
