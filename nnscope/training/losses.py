"""Loss registry used by the training driver.

Each loss works on one sample: the value is the mean of the element-wise
losses over the output components and the gradient is the exact derivative
of that mean with respect to the prediction.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

import numpy as np

from ..core.registry import Registry
from ..core.types import Array

LossFn = Callable[[Array, Array], tuple[float, Array]]

HUBER_DELTA = 1.0
_LOG2 = float(np.log(2.0))


class LossKind(str, Enum):
    MSE = "mse"
    MAE = "mae"
    HUBER = "huber"
    LOG_COSH = "log_cosh"


@dataclass(frozen=True)
class Loss:
    """Loss wrapper returning both the scalar loss and dL/dy."""

    kind: LossKind
    fn: LossFn

    @property
    def name(self) -> str:
        return self.kind.value

    def __call__(self, predictions: Array, targets: Array) -> tuple[float, Array]:
        return self.fn(predictions, targets)


def _mse(pred: Array, target: Array) -> tuple[float, Array]:
    diff = pred - target
    loss = float(np.mean(np.square(diff)))
    return loss, 2.0 * diff / diff.size


def _mae(pred: Array, target: Array) -> tuple[float, Array]:
    diff = pred - target
    loss = float(np.mean(np.abs(diff)))
    return loss, np.sign(diff) / diff.size


def _huber(pred: Array, target: Array, delta: float = HUBER_DELTA) -> tuple[float, Array]:
    diff = pred - target
    abs_diff = np.abs(diff)
    quadratic = np.minimum(abs_diff, delta)
    linear = abs_diff - quadratic
    loss = float(np.mean(0.5 * quadratic**2 + delta * linear))
    grad = np.where(abs_diff <= delta, diff, delta * np.sign(diff))
    return loss, grad / diff.size


def _log_cosh(pred: Array, target: Array) -> tuple[float, Array]:
    diff = pred - target
    abs_diff = np.abs(diff)
    # log(cosh(d)) = |d| + log1p(exp(-2|d|)) - log(2), finite for large |d|
    loss = float(np.mean(abs_diff + np.log1p(np.exp(-2.0 * abs_diff)) - _LOG2))
    return loss, np.tanh(diff) / diff.size


REGISTRY: Registry[LossKind, Loss] = Registry(
    "loss",
    LossKind,
    aliases={
        "mean_squared_error": LossKind.MSE,
        "mean_absolute_error": LossKind.MAE,
        "logcosh": LossKind.LOG_COSH,
    },
)
REGISTRY.register(LossKind.MSE, Loss(LossKind.MSE, _mse))
REGISTRY.register(LossKind.MAE, Loss(LossKind.MAE, _mae))
REGISTRY.register(LossKind.HUBER, Loss(LossKind.HUBER, _huber))
REGISTRY.register(LossKind.LOG_COSH, Loss(LossKind.LOG_COSH, _log_cosh))
REGISTRY.verify()


def get(name: LossKind | str) -> Loss:
    return REGISTRY.get(name)


__all__ = ["Loss", "LossKind", "REGISTRY", "get"]
