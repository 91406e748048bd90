"""Core typing contracts for nnscope."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

Array = np.ndarray
Architecture = Tuple[int, ...]


@dataclass
class ForwardCache:
    """Per-layer vectors captured during a single forward pass."""

    inputs: Array
    pre: List[Array] = field(default_factory=list)
    post: List[Array] = field(default_factory=list)
    masks: List[Optional[Array]] = field(default_factory=list)
    dropout_rate: float = 0.0

    @property
    def output(self) -> Array:
        return self.post[-1]

    def layer_outputs(self) -> List[Array]:
        """Return the input followed by every layer's post-activation."""

        return [self.inputs] + list(self.post)


@dataclass
class Gradients:
    """Gradient buffers shaped like the parameters they belong to."""

    weights: List[Array]
    biases: List[Array]

    @classmethod
    def zeros_like(cls, weights: Sequence[Array], biases: Sequence[Array]) -> "Gradients":
        return cls(
            weights=[np.zeros_like(w) for w in weights],
            biases=[np.zeros_like(b) for b in biases],
        )

    def accumulate(self, other: "Gradients") -> None:
        for idx, grad in enumerate(other.weights):
            self.weights[idx] += grad
        for idx, grad in enumerate(other.biases):
            self.biases[idx] += grad

    def tensors(self) -> List[Array]:
        out: List[Array] = []
        for W, b in zip(self.weights, self.biases):
            out.extend((W, b))
        return out

    def copy(self) -> "Gradients":
        return Gradients(
            weights=[w.copy() for w in self.weights],
            biases=[b.copy() for b in self.biases],
        )


@dataclass(frozen=True)
class WeightStats:
    """Summary statistics over every weight and bias."""

    count: int
    min: float
    max: float
    mean: float
    gradient_mean: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "gradient_mean": self.gradient_mean,
        }


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`nnscope.training.pipelines.run_pipeline`."""

    epochs: int
    final_loss: float
    metrics_path: str
    manifest_path: str
    model_path: str
    summary_path: str = ""
