"""Command line entry point for nnscope training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from nnscope.training import pipelines


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "final_loss": result.final_loss,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "model": result.model_path,
    }
    if getattr(result, "summary_path", ""):
        payload["summary"] = result.summary_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="sine-sigmoid-adam",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--epochs", type=int, help="Override the number of epochs")
    parser.add_argument("--seed", type=int, help="Seed used for initialisation and dropout")
    parser.add_argument("--activation", help="Override the hidden-layer activation")
    parser.add_argument("--optimizer", help="Override the optimizer")
    parser.add_argument("--lr", type=float, help="Override the learning rate")
    parser.add_argument("--run-dir", type=Path, help="Directory for run artifacts")
    parser.add_argument("--enable-plots", action="store_true", help="Write loss.png")
    parser.add_argument("--list-presets", action="store_true", help="List available presets and exit")
    parser.add_argument("--dump-config", type=Path, help="Dump the resolved config to a JSON file")
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        override = pipelines.read_config_file(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)

    overrides: dict = {"model": {}, "train": {}}
    if args.activation:
        overrides["model"]["activation"] = args.activation
    if args.optimizer:
        overrides["train"]["optimizer"] = args.optimizer
    if args.lr is not None:
        overrides["train"]["lr"] = float(args.lr)
    if args.epochs is not None:
        overrides["train"]["epochs"] = int(args.epochs)
    if args.seed is not None:
        overrides["train"]["seed"] = int(args.seed)
    if args.run_dir is not None:
        overrides["train"]["run_dir"] = str(args.run_dir)
    if args.enable_plots:
        overrides["train"]["enable_plots"] = True
    return pipelines.merge_config(config, overrides)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = resolve_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)

    if isinstance(result, list):
        for item in result:
            print(_format_result(item))
    else:
        print(_format_result(result))


if __name__ == "__main__":
    main()
