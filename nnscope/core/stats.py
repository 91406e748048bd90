"""Parameter statistics for the introspection readouts."""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from .params import ParameterStore
from .types import Gradients, WeightStats

GRAD_NORM_PREFIX = "grad_norm_"


def weight_stats(params: ParameterStore, gradients: Optional[Gradients] = None) -> WeightStats:
    """Summarise every weight and bias plus the mean gradient magnitude.

    ``gradient_mean`` is ``0.0`` when no gradients have been accumulated yet.
    NaN/Infinity values are reported as they are.
    """

    values = np.concatenate([t.ravel() for t in params.tensors()])
    grad_mean = 0.0
    if gradients is not None:
        grads = np.concatenate([g.ravel() for g in gradients.tensors()])
        grad_mean = float(np.mean(np.abs(grads)))
    return WeightStats(
        count=int(values.size),
        min=float(np.min(values)),
        max=float(np.max(values)),
        mean=float(np.mean(values)),
        gradient_mean=grad_mean,
    )


def layer_gradient_norms(gradients: Gradients) -> List[float]:
    """Frobenius norm of each layer's weight gradient, input side first."""

    return [float(np.linalg.norm(g)) for g in gradients.weights]


__all__ = ["GRAD_NORM_PREFIX", "layer_gradient_norms", "weight_stats"]
