"""Layer parameters and their independently editable initial snapshot."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .errors import ConfigurationError
from .initializers import Initializer
from .types import Architecture, Array


def validate_architecture(layers: Sequence[int]) -> Architecture:
    """Return ``layers`` as a tuple of ints or raise :class:`ConfigurationError`."""

    try:
        dims = tuple(layers)
    except TypeError as exc:
        raise ConfigurationError(f"Architecture must be a sequence of ints, got {layers!r}") from exc
    if len(dims) < 2:
        raise ConfigurationError("Architecture needs at least an input and an output layer")
    for dim in dims:
        if isinstance(dim, bool) or not isinstance(dim, (int, np.integer)) or dim < 1:
            raise ConfigurationError(f"Layer widths must be positive ints, got {dims!r}")
    return tuple(int(d) for d in dims)


def _check_index(name: str, idx: int, size: int) -> None:
    if not isinstance(idx, (int, np.integer)) or isinstance(idx, bool) or not 0 <= idx < size:
        raise IndexError(f"{name} index {idx!r} out of range [0, {size})")


class ParameterStore:
    """Weights ``W[l]`` of shape ``(out, in)`` and biases ``b[l]`` of shape ``(out,)``.

    The ``initial_*`` arrays are a separate copy used as the baseline for
    "what changed" displays. Editing them never touches the live values.
    """

    def __init__(self, architecture: Sequence[int]) -> None:
        self.architecture: Architecture = validate_architecture(architecture)
        self.weights: List[Array] = []
        self.biases: List[Array] = []
        self.initial_weights: List[Array] = []
        self.initial_biases: List[Array] = []

    @property
    def num_layers(self) -> int:
        return len(self.architecture) - 1

    @property
    def parameter_count(self) -> int:
        dims = self.architecture
        return sum(dims[i] * dims[i + 1] + dims[i + 1] for i in range(len(dims) - 1))

    def build(self, initializer: Initializer, rng: np.random.Generator) -> None:
        weights: List[Array] = []
        biases: List[Array] = []
        for fan_in, fan_out in zip(self.architecture[:-1], self.architecture[1:]):
            sampler = initializer(fan_in, fan_out)
            W = np.asarray(sampler(rng, (fan_out, fan_in)), dtype=np.float64)
            weights.append(W)
            biases.append(np.zeros(fan_out, dtype=np.float64))
        self.weights = weights
        self.biases = biases
        self.take_snapshot()

    def take_snapshot(self) -> None:
        self.initial_weights = [W.copy() for W in self.weights]
        self.initial_biases = [b.copy() for b in self.biases]

    def restore_snapshot(self) -> None:
        self.weights = [W.copy() for W in self.initial_weights]
        self.biases = [b.copy() for b in self.initial_biases]

    def load(self, weights: Sequence[Array], biases: Sequence[Array]) -> None:
        """Replace live parameters and the snapshot. Shapes must already be checked."""

        self.weights = [np.array(W, dtype=np.float64) for W in weights]
        self.biases = [np.array(b, dtype=np.float64) for b in biases]
        self.take_snapshot()

    def tensors(self) -> List[Array]:
        """Live arrays in ``W0, b0, W1, b1, ...`` order."""

        out: List[Array] = []
        for W, b in zip(self.weights, self.biases):
            out.extend((W, b))
        return out

    def edit_initial_weight(self, layer: int, out_idx: int, in_idx: int, value: float) -> None:
        _check_index("layer", layer, self.num_layers)
        rows, cols = self.initial_weights[layer].shape
        _check_index("output neuron", out_idx, rows)
        _check_index("input neuron", in_idx, cols)
        self.initial_weights[layer][out_idx, in_idx] = float(value)

    def edit_initial_bias(self, layer: int, idx: int, value: float) -> None:
        _check_index("layer", layer, self.num_layers)
        _check_index("neuron", idx, self.initial_biases[layer].shape[0])
        self.initial_biases[layer][idx] = float(value)


__all__ = ["ParameterStore", "validate_architecture"]
