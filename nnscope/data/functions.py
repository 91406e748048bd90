"""Named one-dimensional target functions used as training curves.

All functions map inputs on ``[-1, 1]`` to outputs of order one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence

import numpy as np

from ..core.types import Array

TargetFn = Callable[[Array], Array]


def _gaussian(width: float, center: float = 0.0) -> TargetFn:
    return lambda x: np.exp(-((x - center) ** 2) / (2.0 * width**2))


def _trapezoid(x: Array) -> Array:
    ramp = np.clip((x + 0.8) / 0.4, 0.0, 1.0)
    fall = np.clip((0.8 - x) / 0.4, 0.0, 1.0)
    return np.minimum(ramp, fall) * np.where(x > 0.4, 0.5, 1.0)


_FUNCTIONS: Dict[str, TargetFn] = {
    "linear": lambda x: x,
    "quadratic": lambda x: x**2,
    "cubic": lambda x: x**3,
    "sine": lambda x: np.sin(np.pi * x),
    "cosine": lambda x: np.cos(np.pi * x),
    "sine4x": lambda x: np.sin(4.0 * np.pi * x),
    "gaussian": _gaussian(0.3),
    "gaussian_wide": _gaussian(0.6),
    "gaussian_narrow": _gaussian(0.12),
    "inv_gaussian": lambda x: 1.0 - np.exp(-(x**2) / 0.18),
    "double_gaussian": lambda x: _gaussian(0.15, -0.5)(x) + _gaussian(0.15, 0.5)(x),
    "single_peak": _gaussian(0.1, 0.3),
    "asymm_peak": lambda x: np.where(x < 0.2, np.exp(-((x - 0.2) ** 2) / 0.18), np.exp(-((x - 0.2) ** 2) / 0.02)),
    "step": lambda x: np.where(x >= 0.0, 1.0, -1.0),
    "square_wave": lambda x: np.sign(np.sin(2.0 * np.pi * x) + 1e-12),
    "trapezoid": _trapezoid,
    "zigzag": lambda x: 2.0 * np.abs(2.0 * ((2.0 * x) % 1.0) - 1.0) - 1.0,
    "leaky": lambda x: np.where(x > 0.0, x, 0.1 * x),
    "rectified_sine": lambda x: np.abs(np.sin(np.pi * x)),
    "tanh_like": lambda x: np.tanh(3.0 * x),
    "chirp": lambda x: np.sin(np.pi * (x + 1.0) ** 2 * 2.0),
    "gabor": lambda x: np.exp(-(x**2) / 0.18) * np.cos(4.0 * np.pi * x),
    "morlet": lambda x: np.exp(-(x**2) / 0.08) * np.cos(6.0 * np.pi * x),
    "wave_packet": lambda x: np.exp(-(x**2) / 0.32) * np.sin(5.0 * np.pi * x),
    "ripple": lambda x: np.sin(6.0 * np.pi * x) * 0.3 + x,
    "interference": lambda x: 0.5 * (np.sin(3.0 * np.pi * x) + np.sin(5.0 * np.pi * x)),
}


@dataclass(frozen=True)
class Dataset:
    """Evenly sampled training points for one or more target functions."""

    names: tuple
    inputs: Array
    targets: Array

    @property
    def provenance(self) -> Dict[str, object]:
        return {"name": "+".join(self.names), "n_points": int(self.inputs.shape[0])}


def names() -> List[str]:
    return sorted(_FUNCTIONS)


def get(name: str) -> TargetFn:
    try:
        return _FUNCTIONS[name]
    except KeyError as exc:
        available = ", ".join(names())
        raise KeyError(f"Unknown target function {name!r}. Available: {available}") from exc


def make_dataset(target: str | Sequence[str], n_points: int = 30) -> Dataset:
    """Sample ``n_points`` inputs on ``[-1, 1]`` and evaluate each target.

    A list of names produces one output column per function.
    """

    if n_points < 1:
        raise ValueError(f"n_points must be positive, got {n_points}")
    fn_names = (target,) if isinstance(target, str) else tuple(target)
    if not fn_names:
        raise ValueError("At least one target function is required")
    fns = [get(name) for name in fn_names]
    x = np.linspace(-1.0, 1.0, n_points, dtype=np.float64)
    targets = np.stack([np.asarray(fn(x), dtype=np.float64) for fn in fns], axis=1)
    return Dataset(names=fn_names, inputs=x.reshape(-1, 1), targets=targets)


__all__ = ["Dataset", "get", "make_dataset", "names"]
