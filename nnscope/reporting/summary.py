"""Condense a run's JSON-lines record into a deterministic summary."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

_SKIP_KEYS = {"epoch", "seed"}


def read_records(path: str | Path) -> List[Dict[str, object]]:
    path = Path(path)
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


def compute_auc(points: Sequence[float]) -> float:
    """Trapezoidal area under ``points`` with unit spacing."""

    if len(points) < 2:
        return 0.0
    y = np.asarray(points, dtype=np.float64)
    return float(np.sum((y[1:] + y[:-1]) * 0.5))


def first_divergence(records: Sequence[Mapping[str, object]]) -> Optional[int]:
    """Epoch of the first non-finite loss, if any."""

    for record in records:
        loss = record.get("loss")
        if isinstance(loss, (int, float)) and not math.isfinite(loss):
            return int(record["epoch"])
    return None


def _series(records: Sequence[Mapping[str, object]]) -> Dict[str, List[float]]:
    series: Dict[str, List[float]] = {}
    for record in records:
        for key, value in record.items():
            if key in _SKIP_KEYS or isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            series.setdefault(key, []).append(float(value))
    return series


def _describe(values: List[float], tail: int) -> Dict[str, float]:
    finite = [v for v in values if math.isfinite(v)]
    window = values[-tail:] if tail else []
    return {
        "min": min(finite) if finite else math.nan,
        "max": max(finite) if finite else math.nan,
        "mean": float(np.mean(finite)) if finite else math.nan,
        "last": values[-1],
        "tail_auc": compute_auc(window),
    }


def build_summary(records: List[Mapping[str, object]], tail: int) -> Dict[str, object]:
    tail_window = min(tail, len(records))
    finite_losses = [
        (int(r["epoch"]), float(r["loss"]))
        for r in records
        if isinstance(r.get("loss"), (int, float)) and math.isfinite(r["loss"])  # type: ignore[arg-type]
    ]
    best = min(finite_losses, key=lambda item: item[1]) if finite_losses else None
    diverged_at = first_divergence(records)
    return {
        "version": 1,
        "records": len(records),
        "tail_window": tail_window,
        "best_epoch": best[0] if best else None,
        "best_loss": best[1] if best else None,
        "diverged": diverged_at is not None,
        "diverged_at": diverged_at,
        "metrics": {name: _describe(values, tail_window) for name, values in _series(records).items()},
    }


def write_summary(metrics_jsonl: str | Path, out_summary_json: str | Path, *, tail: int = 32) -> str:
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = build_summary(read_records(metrics_jsonl), tail)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["build_summary", "compute_auc", "first_divergence", "read_records", "write_summary"]
