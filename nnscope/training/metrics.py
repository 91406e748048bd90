"""Regression metrics for fitted curves.

Besides the usual error metrics this module reproduces the thresholded
"confusion matrix" used by the observation panel: a prediction counts as
correct when its error, normalised by the target range, is within
``threshold``; otherwise it is classified by which side of the target
midpoint it lands on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping

import numpy as np

from ..core.types import Array


@dataclass(frozen=True)
class ConfusionCounts:
    tp: int
    fp: int
    tn: int
    fn: int

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.tn + self.fn


def _first_column(values) -> Array:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim == 2:
        arr = arr[:, 0]
    return arr.reshape(-1)


def confusion_counts(predictions, targets, threshold: float = 0.1) -> ConfusionCounts:
    preds = _first_column(predictions)
    targs = _first_column(targets)
    if preds.size == 0:
        return ConfusionCounts(0, 0, 0, 0)
    t_min, t_max = float(np.min(targs)), float(np.max(targs))
    value_range = max(1.0, t_max - t_min)
    midpoint = (t_min + t_max) / 2.0
    correct = np.abs(preds - targs) / value_range <= threshold
    target_pos = targs >= midpoint
    pred_pos = preds >= midpoint
    # a wrong magnitude on the right side of the midpoint still counts as agreement
    fn = int(np.sum(~correct & target_pos & ~pred_pos))
    fp = int(np.sum(~correct & ~target_pos & pred_pos))
    tp = int(np.sum(target_pos)) - fn
    tn = int(np.sum(~target_pos)) - fp
    return ConfusionCounts(tp=tp, fp=fp, tn=tn, fn=fn)


def _ratio(num: float, den: float) -> float:
    return float(num / den) if den else 0.0


def r2_score(predictions, targets) -> float:
    preds = _first_column(predictions)
    targs = _first_column(targets)
    if preds.size == 0:
        return 0.0
    ss_res = float(np.sum((targs - preds) ** 2))
    ss_tot = float(np.sum((targs - np.mean(targs)) ** 2))
    return 1.0 if ss_tot == 0 else 1.0 - ss_res / ss_tot


def compute_metrics(predictions, targets, *, threshold: float = 0.1) -> Mapping[str, float]:
    """Return error and agreement metrics on the first output component."""

    preds = _first_column(predictions)
    targs = _first_column(targets)
    if preds.shape != targs.shape:
        raise ValueError(f"predictions {preds.shape} and targets {targs.shape} differ")
    counts = confusion_counts(preds, targs, threshold)
    precision = _ratio(counts.tp, counts.tp + counts.fp)
    recall = _ratio(counts.tp, counts.tp + counts.fn)
    results: Dict[str, float] = {
        "mse": float(np.mean((preds - targs) ** 2)) if preds.size else 0.0,
        "mae": float(np.mean(np.abs(preds - targs))) if preds.size else 0.0,
        "r2": r2_score(preds, targs),
        "accuracy": _ratio(counts.tp + counts.tn, counts.total),
        "precision": precision,
        "recall": recall,
        "f1": _ratio(2 * precision * recall, precision + recall),
        "tp": counts.tp,
        "fp": counts.fp,
        "tn": counts.tn,
        "fn": counts.fn,
    }
    return results


__all__ = ["ConfusionCounts", "compute_metrics", "confusion_counts", "r2_score"]
