"""Activation functions and their derivatives for nnscope.

Every derivative is taken with respect to the pre-activation ``x`` so the
backward pass can evaluate it directly on the cached ``pre`` vectors.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

import numpy as np

from .registry import Registry
from .types import Array

LEAKY_SLOPE = 0.01
PRELU_SLOPE = 0.25
ELU_ALPHA = 1.0
CELU_ALPHA = 1.0
SELU_ALPHA = 1.6732632423543772
SELU_SCALE = 1.0507009873554805
_GELU_C = np.sqrt(2.0 / np.pi)
_GELU_K = 0.044715


class ActivationKind(str, Enum):
    LINEAR = "linear"
    SIGMOID = "sigmoid"
    TANH = "tanh"
    RELU = "relu"
    LEAKY_RELU = "leaky_relu"
    ELU = "elu"
    SELU = "selu"
    GELU = "gelu"
    SWISH = "swish"
    MISH = "mish"
    SOFTPLUS = "softplus"
    SOFTSIGN = "softsign"
    PRELU = "prelu"
    CELU = "celu"


@dataclass(frozen=True)
class Activation:
    """An activation function paired with its derivative."""

    kind: ActivationKind
    fn: Callable[[Array], Array]
    deriv: Callable[[Array], Array]

    @property
    def name(self) -> str:
        return self.kind.value

    def __call__(self, x: Array) -> Array:
        return self.fn(x)


def sigmoid(x: Array) -> Array:
    # tanh form avoids overflow in exp for large |x|
    return 0.5 * (1.0 + np.tanh(0.5 * x))


def _sigmoid_deriv(x: Array) -> Array:
    s = sigmoid(x)
    return s * (1.0 - s)


def _linear(x: Array) -> Array:
    return np.asarray(x, dtype=np.float64).copy()


def _linear_deriv(x: Array) -> Array:
    return np.ones_like(x, dtype=np.float64)


def _tanh_deriv(x: Array) -> Array:
    return 1.0 - np.tanh(x) ** 2


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def _relu_deriv(x: Array) -> Array:
    return (x > 0).astype(np.float64)


def _leaky(slope: float):
    def fn(x: Array) -> Array:
        return np.where(x > 0, x, slope * x)

    def deriv(x: Array) -> Array:
        return np.where(x > 0, 1.0, slope)

    return fn, deriv


def _elu_family(alpha: float, scale: float = 1.0):
    def fn(x: Array) -> Array:
        return scale * np.where(x > 0, x, alpha * np.expm1(np.minimum(x, 0.0)))

    def deriv(x: Array) -> Array:
        return scale * np.where(x > 0, 1.0, alpha * np.exp(np.minimum(x, 0.0)))

    return fn, deriv


def _celu(x: Array) -> Array:
    return np.where(x > 0, x, CELU_ALPHA * np.expm1(np.minimum(x, 0.0) / CELU_ALPHA))


def _celu_deriv(x: Array) -> Array:
    return np.where(x > 0, 1.0, np.exp(np.minimum(x, 0.0) / CELU_ALPHA))


def _gelu(x: Array) -> Array:
    return 0.5 * x * (1.0 + np.tanh(_GELU_C * (x + _GELU_K * x**3)))


def _gelu_deriv(x: Array) -> Array:
    t = np.tanh(_GELU_C * (x + _GELU_K * x**3))
    return 0.5 * (1.0 + t) + 0.5 * x * (1.0 - t**2) * _GELU_C * (1.0 + 3.0 * _GELU_K * x**2)


def _swish(x: Array) -> Array:
    return x * sigmoid(x)


def _swish_deriv(x: Array) -> Array:
    s = sigmoid(x)
    return s + x * s * (1.0 - s)


def softplus(x: Array) -> Array:
    return np.logaddexp(0.0, x)


def _mish(x: Array) -> Array:
    return x * np.tanh(softplus(x))


def _mish_deriv(x: Array) -> Array:
    t = np.tanh(softplus(x))
    return t + x * (1.0 - t**2) * sigmoid(x)


def _softsign(x: Array) -> Array:
    return x / (1.0 + np.abs(x))


def _softsign_deriv(x: Array) -> Array:
    return 1.0 / (1.0 + np.abs(x)) ** 2


REGISTRY: Registry[ActivationKind, Activation] = Registry(
    "activation",
    ActivationKind,
    aliases={
        "identity": ActivationKind.LINEAR,
        "none": ActivationKind.LINEAR,
        "leaky": ActivationKind.LEAKY_RELU,
        "leakyrelu": ActivationKind.LEAKY_RELU,
        "silu": ActivationKind.SWISH,
        "parametric_relu": ActivationKind.PRELU,
    },
)


def _register(kind: ActivationKind, fn, deriv) -> None:
    REGISTRY.register(kind, Activation(kind=kind, fn=fn, deriv=deriv))


_register(ActivationKind.LINEAR, _linear, _linear_deriv)
_register(ActivationKind.SIGMOID, sigmoid, _sigmoid_deriv)
_register(ActivationKind.TANH, np.tanh, _tanh_deriv)
_register(ActivationKind.RELU, relu, _relu_deriv)
_register(ActivationKind.LEAKY_RELU, *_leaky(LEAKY_SLOPE))
_register(ActivationKind.ELU, *_elu_family(ELU_ALPHA))
_register(ActivationKind.SELU, *_elu_family(SELU_ALPHA, SELU_SCALE))
_register(ActivationKind.GELU, _gelu, _gelu_deriv)
_register(ActivationKind.SWISH, _swish, _swish_deriv)
_register(ActivationKind.MISH, _mish, _mish_deriv)
_register(ActivationKind.SOFTPLUS, softplus, sigmoid)
_register(ActivationKind.SOFTSIGN, _softsign, _softsign_deriv)
_register(ActivationKind.PRELU, *_leaky(PRELU_SLOPE))
_register(ActivationKind.CELU, _celu, _celu_deriv)
REGISTRY.verify()


def get(name: ActivationKind | str) -> Activation:
    """Return the activation registered under ``name``."""

    return REGISTRY.get(name)


__all__ = ["Activation", "ActivationKind", "REGISTRY", "get", "relu", "sigmoid", "softplus"]
