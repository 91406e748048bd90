"""Forward propagation with optional dropout."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .activations import Activation
from .errors import ShapeError
from .params import ParameterStore
from .types import Array, ForwardCache


def as_vector(value, width: int, what: str = "input") -> Array:
    """Coerce ``value`` to a float64 vector of length ``width``.

    A bare scalar is accepted as a 1-wide vector.
    """

    try:
        vec = np.asarray(value, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ShapeError(f"{what} must be numeric, got {value!r}") from exc
    if vec.ndim == 0:
        vec = vec.reshape(1)
    if vec.ndim != 1 or vec.shape[0] != width:
        raise ShapeError(f"{what} has shape {vec.shape}, expected ({width},)")
    return vec


def dropout_mask(rng: np.random.Generator, size: int, rate: float) -> Array:
    """Bernoulli keep-mask with keep probability ``1 - rate``."""

    return (rng.random(size) >= rate).astype(np.float64)


def forward(
    params: ParameterStore,
    x,
    activation: Activation,
    *,
    training: bool = False,
    dropout_rate: float = 0.0,
    rng: Optional[np.random.Generator] = None,
) -> tuple[Array, ForwardCache]:
    inputs = as_vector(x, params.architecture[0], "input")
    apply_dropout = training and dropout_rate > 0.0
    if apply_dropout and rng is None:
        raise ValueError("training-mode dropout needs a random generator")

    cache = ForwardCache(inputs=inputs, dropout_rate=dropout_rate if apply_dropout else 0.0)
    last_idx = params.num_layers - 1
    h = inputs
    for idx, (W, b) in enumerate(zip(params.weights, params.biases)):
        pre = W @ h + b
        if idx == last_idx:
            post = pre
            mask = None
        else:
            post = activation(pre)
            mask = None
            if apply_dropout:
                mask = dropout_mask(rng, post.shape[0], dropout_rate)
                post = post * mask / (1.0 - dropout_rate)
        cache.pre.append(pre)
        cache.post.append(post)
        cache.masks.append(mask)
        h = post
    return h, cache


__all__ = ["as_vector", "dropout_mask", "forward"]
