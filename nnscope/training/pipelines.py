"""Pipeline assembly: build a network from a config, train it and write artifacts."""

from __future__ import annotations

import json
import os
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from ..core.types import RunResult
from ..data import functions
from ..reporting.artifacts import RUN_ROOT_ENV, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from ..serialization import save_model
from .metrics import compute_metrics
from .trainer import Network, Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "sine-sigmoid-adam": {
        "data": {"name": "sine", "n_points": 30},
        "model": {"hidden": [8, 8], "activation": "sigmoid", "init": "xavier"},
        "train": {"optimizer": "adam", "lr": 0.01, "loss": "mse", "epochs": 500, "seed": 0},
    },
    "identity-tanh-sgd": {
        "data": {"name": "linear", "n_points": 3},
        "model": {"hidden": [4], "activation": "tanh", "init": "xavier"},
        "train": {"optimizer": "sgd", "lr": 0.1, "loss": "mse", "epochs": 500, "seed": 0},
    },
    "vanishing-gradient-deep-sigmoid": {
        "data": {"name": "sine", "n_points": 30},
        "model": {"hidden": [4, 4, 4, 4, 4, 4], "activation": "sigmoid", "init": "xavier"},
        "train": {"optimizer": "sgd", "lr": 0.5, "loss": "mse", "epochs": 300, "seed": 0},
    },
    "exploding-relu-high-lr": {
        "data": {"name": "sine", "n_points": 30},
        "model": {"hidden": [8, 8], "activation": "relu", "init": "he"},
        "train": {"optimizer": "sgd", "lr": 1.0, "loss": "mse", "epochs": 100, "seed": 0},
    },
    "huber-step": {
        "data": {"name": "step", "n_points": 30},
        "model": {"hidden": [8, 8], "activation": "tanh", "init": "xavier"},
        "train": {"optimizer": "adam", "lr": 0.01, "loss": "huber", "epochs": 500, "seed": 0},
    },
    "multi-output-sine-cosine": {
        "data": {"name": ["sine", "cosine"], "n_points": 30},
        "model": {"hidden": [8, 8], "activation": "tanh", "init": "xavier"},
        "train": {"optimizer": "adam", "lr": 0.01, "loss": "mse", "epochs": 500, "seed": 0},
    },
    "dropout-sine": {
        "data": {"name": "sine", "n_points": 30},
        "model": {"hidden": [16, 16], "activation": "tanh", "init": "xavier", "dropout": 0.2},
        "train": {"optimizer": "adam", "lr": 0.01, "loss": "mse", "epochs": 500, "seed": 0},
    },
    "sgd-vs-adam-gaussian": {
        "data": {"name": "gaussian", "n_points": 30},
        "model": {"hidden": [8, 8], "activation": "tanh", "init": "xavier"},
        "train": {"optimizer": "sgd", "lr": 0.1, "loss": "mse", "epochs": 300, "seed": 0},
        "compare": {"train": {"optimizer": "adam", "lr": 0.01}},
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_REQUIRED_SECTIONS = {"data", "model", "train"}


def read_config_file(path: str | Path) -> Mapping[str, object]:
    """Load a JSON or YAML config file into a mapping."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    presets: Dict[str, Mapping[str, object]] = {}
    if not _PRESET_DIR.exists():
        return presets
    for file in sorted(_PRESET_DIR.iterdir()):
        if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
            continue
        data = read_config_file(file)
        missing = _REQUIRED_SECTIONS - set(data)
        if missing:
            raise KeyError(f"Preset {file.name} is missing required sections: {', '.join(sorted(missing))}")
        presets[file.stem] = json.loads(json.dumps(data))
    return presets


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    available = presets()
    try:
        return available[name]
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def merge_config(base: dict, override: Mapping[str, object]) -> dict:
    """Recursively overlay ``override`` onto ``base``."""

    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            base[key] = merge_config(dict(base[key]), value)
        else:
            base[key] = deepcopy(value)
    return base


def run_pipeline(config: Mapping[str, object]) -> RunResult | List[RunResult]:
    """Train the configured network; a ``compare`` section adds a variant run."""

    if "compare" not in config:
        return _train_single(config)
    base = {k: deepcopy(v) for k, v in config.items() if k != "compare"}
    run_dir = _resolve_run_dir(dict(base.get("train", {})), base)
    baseline = merge_config(deepcopy(base), {"train": {"run_dir": str(run_dir / "baseline")}})
    variant = merge_config(deepcopy(base), config["compare"])
    variant = merge_config(variant, {"train": {"run_dir": str(run_dir / "variant")}})
    return [_train_single(baseline), _train_single(variant)]


def build_dims(model_cfg: Mapping[str, object], d_in: int, d_out: int) -> List[int]:
    if "layers" in model_cfg:
        dims = [int(d) for d in model_cfg["layers"]]  # type: ignore[union-attr]
        if dims and (dims[0] != d_in or dims[-1] != d_out):
            raise ValueError(f"Configured layers {dims} do not match data widths {d_in} -> {d_out}")
        return dims
    hidden = [int(h) for h in model_cfg.get("hidden", [8])]  # type: ignore[union-attr]
    return [d_in, *hidden, d_out]


def build_network(config: Mapping[str, object], dims: Sequence[int]) -> Network:
    model_cfg = dict(config.get("model", {}))
    train_cfg = dict(config.get("train", {}))
    return Network(
        dims,
        str(model_cfg.get("activation", "sigmoid")),
        str(train_cfg.get("optimizer", "adam")),
        float(train_cfg.get("lr", 0.01)),
        loss=str(train_cfg.get("loss", "mse")),
        init=str(model_cfg.get("init", "xavier")),
        dropout_rate=float(model_cfg.get("dropout", 0.0)),
        seed=int(train_cfg.get("seed", 0)),
    )


def _train_single(config: Mapping[str, object]) -> RunResult:
    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    dataset = functions.make_dataset(data_cfg.get("name", "sine"), int(data_cfg.get("n_points", 30)))
    dims = build_dims(model_cfg, dataset.inputs.shape[1], dataset.targets.shape[1])
    network = build_network(config, dims)

    seed = int(train_cfg.get("seed", 0))
    epochs = int(train_cfg.get("epochs", 100))
    target_loss = train_cfg.get("target_loss")
    run_dir = _resolve_run_dir(train_cfg, config)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=str(dataset.provenance["name"]),
        network=network,
        epochs=epochs,
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=seed)
    trainer = Trainer(
        network,
        callbacks=[
            jsonl,
            CsvSink(run_dir / "metrics.csv"),
            PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False))),
        ],
    )
    history = trainer.run(
        dataset.inputs,
        dataset.targets,
        epochs,
        target_loss=float(target_loss) if target_loss is not None else None,
    )
    trainer.close()

    predictions = network.predict_many(dataset.inputs)
    final_metrics = dict(
        compute_metrics(predictions, dataset.targets, threshold=float(train_cfg.get("metric_threshold", 0.1)))
    )
    final_metrics["loss"] = history[-1] if history else float("nan")
    (run_dir / "metrics_final.json").write_text(json.dumps(final_metrics, indent=2))

    model_path = save_model(network, run_dir / "model.json")
    safe_config = _safe_config(config, dims)
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        network={
            "architecture": list(dims),
            "parameters": network.parameter_count,
            "activation": network.activation,
            "optimizer": network.optimizer_name,
        },
    )
    summary_path = write_summary(jsonl.path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32)))

    return RunResult(
        epochs=network.epoch,
        final_loss=float(final_metrics["loss"]),
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        model_path=model_path,
        summary_path=summary_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], config: Mapping[str, object]) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    root = Path(os.environ.get(RUN_ROOT_ENV, "runs"))
    data_name = config.get("data", {}).get("name", "sine")  # type: ignore[union-attr]
    if not isinstance(data_name, str):
        data_name = "+".join(data_name)
    optimizer = str(train_cfg.get("optimizer", "adam"))
    return root / time.strftime("%Y%m%d-%H%M%S") / data_name / optimizer


def _safe_config(config: Mapping[str, object], dims: Sequence[int]) -> Mapping[str, object]:
    copied = json.loads(json.dumps(config))
    copied.setdefault("model", {})["layers"] = list(dims)
    return copied


def _print_startup_summary(*, dataset_name: str, network: Network, epochs: int) -> None:
    print("=== nnscope run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Architecture  : {list(network.architecture)}")
    print(f"Activation    : {network.activation}")
    print(f"Loss          : {network.loss}")
    print(f"Optimizer     : {network.optimizer_name} (lr={network.learning_rate})")
    print(f"Dropout       : {network.dropout_rate}")
    print(f"Epochs        : {epochs}")
    print(f"Parameters    : {network.parameter_count}")
    print("===================")


__all__ = ["build_dims", "build_network", "load_preset", "merge_config", "presets", "read_config_file", "run_pipeline"]
