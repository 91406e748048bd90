"""Weight initialisation schemes."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Tuple

import numpy as np

from .registry import Registry
from .types import Array

Sampler = Callable[[np.random.Generator, Tuple[int, ...]], Array]
Initializer = Callable[[int, int], Sampler]


class InitKind(str, Enum):
    XAVIER = "xavier"
    HE = "he"
    LECUN = "lecun"
    UNIFORM = "uniform"
    NORMAL = "normal"
    ZEROS = "zeros"
    ONES = "ones"


def xavier(fan_in: int, fan_out: int) -> Sampler:
    bound = np.sqrt(6.0 / (fan_in + fan_out))
    return lambda rng, shape: rng.uniform(-bound, bound, size=shape)


def he(fan_in: int, fan_out: int) -> Sampler:
    std = np.sqrt(2.0 / fan_in)
    return lambda rng, shape: rng.normal(0.0, std, size=shape)


def lecun(fan_in: int, fan_out: int) -> Sampler:
    std = np.sqrt(1.0 / fan_in)
    return lambda rng, shape: rng.normal(0.0, std, size=shape)


def uniform(fan_in: int, fan_out: int) -> Sampler:
    return lambda rng, shape: rng.uniform(-1.0, 1.0, size=shape)


def normal(fan_in: int, fan_out: int) -> Sampler:
    return lambda rng, shape: rng.normal(0.0, 0.1, size=shape)


def zeros(fan_in: int, fan_out: int) -> Sampler:
    return lambda rng, shape: np.zeros(shape, dtype=np.float64)


def ones(fan_in: int, fan_out: int) -> Sampler:
    return lambda rng, shape: np.ones(shape, dtype=np.float64)


REGISTRY: Registry[InitKind, Initializer] = Registry(
    "initializer",
    InitKind,
    aliases={
        "glorot": InitKind.XAVIER,
        "kaiming": InitKind.HE,
        "zero": InitKind.ZEROS,
        "one": InitKind.ONES,
    },
)
REGISTRY.register(InitKind.XAVIER, xavier)
REGISTRY.register(InitKind.HE, he)
REGISTRY.register(InitKind.LECUN, lecun)
REGISTRY.register(InitKind.UNIFORM, uniform)
REGISTRY.register(InitKind.NORMAL, normal)
REGISTRY.register(InitKind.ZEROS, zeros)
REGISTRY.register(InitKind.ONES, ones)
REGISTRY.verify()


def get(name: InitKind | str) -> Initializer:
    return REGISTRY.get(name)


__all__ = ["InitKind", "Initializer", "Sampler", "REGISTRY", "get"]
