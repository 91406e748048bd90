"""Reverse-mode gradients for a single sample."""

from __future__ import annotations

import numpy as np

from .activations import Activation
from .forward import as_vector
from .params import ParameterStore
from .types import Array, ForwardCache, Gradients


def backward(
    params: ParameterStore,
    cache: ForwardCache,
    target,
    activation: Activation,
    loss,
) -> Gradients:
    """Return parameter gradients for ``cache`` against ``target``.

    ``loss`` is any callable returning ``(value, dL/dprediction)``. The output
    layer has no activation, so its pre-activation gradient is the loss
    gradient itself.
    """

    target = as_vector(target, params.architecture[-1], "target")
    _, delta = loss(cache.output, target)
    delta = np.asarray(delta, dtype=np.float64)

    num_layers = params.num_layers
    grad_w: list[Array] = [np.empty(0)] * num_layers
    grad_b: list[Array] = [np.empty(0)] * num_layers
    for idx in reversed(range(num_layers)):
        layer_input = cache.post[idx - 1] if idx > 0 else cache.inputs
        grad_b[idx] = delta.copy()
        grad_w[idx] = np.outer(delta, layer_input)
        if idx == 0:
            break
        upstream = params.weights[idx].T @ delta
        mask = cache.masks[idx - 1]
        if mask is not None:
            upstream = upstream * mask / (1.0 - cache.dropout_rate)
        delta = upstream * activation.deriv(cache.pre[idx - 1])
    return Gradients(weights=grad_w, biases=grad_b)


__all__ = ["backward"]
