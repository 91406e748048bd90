"""Parameter update rules.

Each optimizer is a dataclass carrying only the auxiliary buffers its rule
needs, one per parameter tensor in ``W0, b0, W1, b1, ...`` order. Switching
optimizer or learning rate builds a new instance; buffers never carry over.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, List, Protocol, Union

import numpy as np

from ..core.errors import ConfigurationError
from ..core.params import ParameterStore
from ..core.registry import Registry
from ..core.types import Array, Gradients

EPSILON = 1e-8


class OptimizerKind(str, Enum):
    SGD = "sgd"
    MOMENTUM = "momentum"
    RMSPROP = "rmsprop"
    ADAGRAD = "adagrad"
    ADAM = "adam"
    NADAM = "nadam"


class Optimizer(Protocol):
    """Protocol implemented by every update rule."""

    kind: ClassVar[OptimizerKind]
    learning_rate: float

    def step(self, params: ParameterStore, grads: Gradients) -> None:
        """Apply one update to ``params`` in place."""


def _zeros(params: ParameterStore) -> List[Array]:
    return [np.zeros_like(t) for t in params.tensors()]


@dataclass
class SGD:
    learning_rate: float
    kind: ClassVar[OptimizerKind] = OptimizerKind.SGD

    @classmethod
    def create(cls, learning_rate: float, params: ParameterStore) -> "SGD":
        return cls(learning_rate)

    def step(self, params: ParameterStore, grads: Gradients) -> None:
        for param, grad in zip(params.tensors(), grads.tensors()):
            param -= self.learning_rate * grad


@dataclass
class Momentum:
    learning_rate: float
    velocity: List[Array]
    beta: float = 0.9
    kind: ClassVar[OptimizerKind] = OptimizerKind.MOMENTUM

    @classmethod
    def create(cls, learning_rate: float, params: ParameterStore) -> "Momentum":
        return cls(learning_rate, velocity=_zeros(params))

    def step(self, params: ParameterStore, grads: Gradients) -> None:
        for param, grad, v in zip(params.tensors(), grads.tensors(), self.velocity):
            v *= self.beta
            v += grad
            param -= self.learning_rate * v


@dataclass
class RMSProp:
    learning_rate: float
    square_avg: List[Array]
    beta: float = 0.9
    eps: float = EPSILON
    kind: ClassVar[OptimizerKind] = OptimizerKind.RMSPROP

    @classmethod
    def create(cls, learning_rate: float, params: ParameterStore) -> "RMSProp":
        return cls(learning_rate, square_avg=_zeros(params))

    def step(self, params: ParameterStore, grads: Gradients) -> None:
        for param, grad, s in zip(params.tensors(), grads.tensors(), self.square_avg):
            s *= self.beta
            s += (1.0 - self.beta) * grad**2
            param -= self.learning_rate * grad / (np.sqrt(s) + self.eps)


@dataclass
class AdaGrad:
    learning_rate: float
    accumulator: List[Array]
    eps: float = EPSILON
    kind: ClassVar[OptimizerKind] = OptimizerKind.ADAGRAD

    @classmethod
    def create(cls, learning_rate: float, params: ParameterStore) -> "AdaGrad":
        return cls(learning_rate, accumulator=_zeros(params))

    def step(self, params: ParameterStore, grads: Gradients) -> None:
        for param, grad, s in zip(params.tensors(), grads.tensors(), self.accumulator):
            s += grad**2
            param -= self.learning_rate * grad / (np.sqrt(s) + self.eps)


@dataclass
class Adam:
    learning_rate: float
    m: List[Array]
    v: List[Array]
    t: int = 0
    beta1: float = 0.9
    beta2: float = 0.999
    eps: float = EPSILON
    kind: ClassVar[OptimizerKind] = OptimizerKind.ADAM

    @classmethod
    def create(cls, learning_rate: float, params: ParameterStore):
        return cls(learning_rate, m=_zeros(params), v=_zeros(params))

    def _moments(self, grads: Gradients):
        self.t += 1
        bias1 = 1.0 - self.beta1**self.t
        bias2 = 1.0 - self.beta2**self.t
        for grad, m, v in zip(grads.tensors(), self.m, self.v):
            m *= self.beta1
            m += (1.0 - self.beta1) * grad
            v *= self.beta2
            v += (1.0 - self.beta2) * grad**2
            yield grad, m / bias1, v / bias2, bias1

    def step(self, params: ParameterStore, grads: Gradients) -> None:
        for param, (_, m_hat, v_hat, _) in zip(params.tensors(), self._moments(grads)):
            param -= self.learning_rate * m_hat / (np.sqrt(v_hat) + self.eps)


@dataclass
class Nadam(Adam):
    kind: ClassVar[OptimizerKind] = OptimizerKind.NADAM

    def step(self, params: ParameterStore, grads: Gradients) -> None:
        for param, (grad, m_hat, v_hat, bias1) in zip(params.tensors(), self._moments(grads)):
            lookahead = self.beta1 * m_hat + (1.0 - self.beta1) * grad / bias1
            param -= self.learning_rate * lookahead / (np.sqrt(v_hat) + self.eps)


AnyOptimizer = Union[SGD, Momentum, RMSProp, AdaGrad, Adam, Nadam]

REGISTRY: Registry[OptimizerKind, type] = Registry(
    "optimizer",
    OptimizerKind,
    aliases={"sgd_momentum": OptimizerKind.MOMENTUM, "rms_prop": OptimizerKind.RMSPROP},
)
for _cls in (SGD, Momentum, RMSProp, AdaGrad, Adam, Nadam):
    REGISTRY.register(_cls.kind, _cls)
REGISTRY.verify()


def check_learning_rate(learning_rate) -> float:
    try:
        lr = float(learning_rate)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Learning rate must be a number, got {learning_rate!r}") from exc
    if not math.isfinite(lr) or lr <= 0.0:
        raise ConfigurationError(f"Learning rate must be positive and finite, got {lr}")
    return lr


def make_optimizer(
    name: OptimizerKind | str, learning_rate: float, params: ParameterStore
) -> AnyOptimizer:
    """Build a fresh optimizer with zeroed state sized for ``params``."""

    cls = REGISTRY.get(name)
    return cls.create(check_learning_rate(learning_rate), params)


__all__ = [
    "AdaGrad",
    "Adam",
    "Momentum",
    "Nadam",
    "Optimizer",
    "OptimizerKind",
    "RMSProp",
    "SGD",
    "REGISTRY",
    "check_learning_rate",
    "make_optimizer",
]
