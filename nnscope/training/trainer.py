"""Full-batch training driver and epoch loop for nnscope networks."""

from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

from ..core import activations as activation_registry
from ..core import initializers as init_registry
from ..core.backprop import backward
from ..core.errors import ConfigurationError, ShapeError
from ..core.forward import as_vector, forward
from ..core.params import ParameterStore
from ..core.stats import GRAD_NORM_PREFIX, layer_gradient_norms, weight_stats
from ..core.types import Architecture, Array, ForwardCache, Gradients, WeightStats
from . import losses as loss_registry
from .optimizers import AnyOptimizer, make_optimizer


def _check_dropout_rate(rate) -> float:
    try:
        value = float(rate)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Dropout rate must be a number, got {rate!r}") from exc
    if not 0.0 <= value < 1.0:
        raise ConfigurationError(f"Dropout rate must lie in [0, 1), got {value}")
    return value


class Network:
    """Dense feed-forward network trained one full batch at a time.

    Hidden layers use the configured activation; the output layer is linear.
    Every weight and bias keeps a baseline copy (``initial_weights`` /
    ``initial_biases``) and the gradients of the last completed epoch, so
    readers can show what changed and why between epochs.
    """

    def __init__(
        self,
        architecture: Sequence[int],
        activation: str = "sigmoid",
        optimizer: str = "adam",
        learning_rate: float = 0.01,
        *,
        loss: str = "mse",
        init: str = "xavier",
        dropout_rate: float = 0.0,
        seed: Optional[int] = None,
    ) -> None:
        self.params = ParameterStore(architecture)
        self._activation = activation_registry.get(activation)
        self._loss = loss_registry.get(loss)
        self._init_kind = init_registry.REGISTRY.resolve(init)
        self.dropout_rate = _check_dropout_rate(dropout_rate)
        self.rng = np.random.default_rng(seed)
        self.params.build(init_registry.get(self._init_kind), self.rng)
        self.optimizer: AnyOptimizer = make_optimizer(optimizer, learning_rate, self.params)
        self.loss_history: List[float] = []
        self.epoch = 0
        self.gradients: Optional[Gradients] = None
        self.last_cache: Optional[ForwardCache] = None

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def architecture(self) -> Architecture:
        return self.params.architecture

    @property
    def weights(self) -> List[Array]:
        return self.params.weights

    @property
    def biases(self) -> List[Array]:
        return self.params.biases

    @property
    def initial_weights(self) -> List[Array]:
        return self.params.initial_weights

    @property
    def initial_biases(self) -> List[Array]:
        return self.params.initial_biases

    @property
    def weight_gradients(self) -> Optional[List[Array]]:
        return self.gradients.weights if self.gradients is not None else None

    @property
    def bias_gradients(self) -> Optional[List[Array]]:
        return self.gradients.biases if self.gradients is not None else None

    @property
    def activation(self) -> str:
        return self._activation.name

    @property
    def loss(self) -> str:
        return self._loss.name

    @property
    def initializer(self) -> str:
        return self._init_kind.value

    @property
    def optimizer_name(self) -> str:
        return self.optimizer.kind.value

    @property
    def learning_rate(self) -> float:
        return self.optimizer.learning_rate

    @property
    def parameter_count(self) -> int:
        return self.params.parameter_count

    # ------------------------------------------------------------------
    # Configuration

    def set_activation(self, name: str) -> None:
        self._activation = activation_registry.get(name)

    def set_loss(self, name: str) -> None:
        self._loss = loss_registry.get(name)

    def set_initializer(self, name: str) -> None:
        """Choose the scheme used by :meth:`reinitialize`; live values are kept."""

        self._init_kind = init_registry.REGISTRY.resolve(name)

    def set_optimizer(self, name: str, learning_rate: Optional[float] = None) -> None:
        lr = self.learning_rate if learning_rate is None else learning_rate
        self.optimizer = make_optimizer(name, lr, self.params)

    def set_dropout_rate(self, rate: float) -> None:
        self.dropout_rate = _check_dropout_rate(rate)

    # ------------------------------------------------------------------
    # Propagation

    def forward(self, x, training: bool = True) -> Array:
        """Run one forward pass and keep its cache in :attr:`last_cache`."""

        output, cache = forward(
            self.params,
            x,
            self._activation,
            training=training,
            dropout_rate=self.dropout_rate,
            rng=self.rng,
        )
        self.last_cache = cache
        return output

    def predict(self, x) -> Array:
        output, _ = forward(self.params, x, self._activation, training=False)
        return output

    def predict_many(self, inputs) -> Array:
        return np.stack([self.predict(x) for x in inputs])

    def train_epoch(self, inputs, targets) -> float:
        """Train on the whole batch and apply one optimizer step.

        Gradients are summed over the samples. The mean sample loss is
        appended to :attr:`loss_history` and returned.
        """

        xs, ts = self._check_batch(inputs, targets)
        accumulated = Gradients.zeros_like(self.params.weights, self.params.biases)
        total = 0.0
        for x, t in zip(xs, ts):
            output, cache = forward(
                self.params,
                x,
                self._activation,
                training=True,
                dropout_rate=self.dropout_rate,
                rng=self.rng,
            )
            value, _ = self._loss(output, t)
            total += value
            accumulated.accumulate(backward(self.params, cache, t, self._activation, self._loss))
            self.last_cache = cache
        self.optimizer.step(self.params, accumulated)
        self.gradients = accumulated
        epoch_loss = total / len(xs)
        self.loss_history.append(epoch_loss)
        self.epoch += 1
        return epoch_loss

    def evaluate(self, inputs, targets) -> float:
        """Mean loss of inference-mode predictions; no state changes."""

        xs, ts = self._check_batch(inputs, targets)
        values = [self._loss(self.predict(x), t)[0] for x, t in zip(xs, ts)]
        return float(np.mean(values))

    def _check_batch(self, inputs, targets) -> tuple[List[Array], List[Array]]:
        try:
            n_inputs, n_targets = len(inputs), len(targets)
        except TypeError as exc:
            raise ShapeError("inputs and targets must be sequences") from exc
        if n_inputs != n_targets:
            raise ShapeError(f"Got {n_inputs} inputs but {n_targets} targets")
        if n_inputs == 0:
            raise ShapeError("Cannot train on an empty batch")
        in_dim, out_dim = self.architecture[0], self.architecture[-1]
        xs = [as_vector(x, in_dim, f"input {i}") for i, x in enumerate(inputs)]
        ts = [as_vector(t, out_dim, f"target {i}") for i, t in enumerate(targets)]
        return xs, ts

    # ------------------------------------------------------------------
    # Lifecycle

    def reset(self) -> None:
        """Restore the snapshot values and clear history and optimizer state."""

        self.params.restore_snapshot()
        self._clear_progress()

    def reinitialize(self, seed: Optional[int] = None) -> None:
        """Draw fresh parameters with the initializer and take a new snapshot."""

        if seed is not None:
            self.rng = np.random.default_rng(seed)
        self.params.build(init_registry.get(self._init_kind), self.rng)
        self._clear_progress()

    def _clear_progress(self) -> None:
        self.epoch = 0
        self.loss_history = []
        self.gradients = None
        self.last_cache = None
        self.optimizer = make_optimizer(self.optimizer.kind, self.learning_rate, self.params)

    # ------------------------------------------------------------------
    # Introspection

    def weight_stats(self) -> WeightStats:
        return weight_stats(self.params, self.gradients)

    def edit_initial_weight(self, layer: int, out_idx: int, in_idx: int, value: float) -> None:
        self.params.edit_initial_weight(layer, out_idx, in_idx, value)

    def edit_initial_bias(self, layer: int, idx: int, value: float) -> None:
        self.params.edit_initial_bias(layer, idx, value)

    # ------------------------------------------------------------------
    # Serialization

    def export_model(self) -> dict:
        from ..serialization import export_model

        return export_model(self)

    def import_model(self, document: Mapping[str, object]) -> None:
        from ..serialization import import_model

        import_model(self, document)

    @classmethod
    def from_document(cls, document: Mapping[str, object], *, seed: Optional[int] = None) -> "Network":
        from ..serialization import network_from_document

        return network_from_document(document, seed=seed)


def epoch_metrics(network: Network, loss: float) -> Dict[str, float]:
    """Flat record of one epoch: loss, weight statistics and per-layer gradient norms."""

    stats = network.weight_stats()
    metrics = {
        "loss": float(loss),
        "weight_min": stats.min,
        "weight_max": stats.max,
        "weight_mean": stats.mean,
        "gradient_mean": stats.gradient_mean,
    }
    if network.gradients is not None:
        for idx, norm in enumerate(layer_gradient_norms(network.gradients)):
            metrics[f"{GRAD_NORM_PREFIX}{idx}"] = norm
    return metrics


class Trainer:
    """Call :meth:`Network.train_epoch` repeatedly and report each epoch."""

    def __init__(self, network: Network, callbacks: Sequence[object] | None = None) -> None:
        self.network = network
        self.callbacks = list(callbacks or [])

    def run(
        self,
        inputs,
        targets,
        epochs: int,
        *,
        target_loss: Optional[float] = None,
    ) -> List[float]:
        if epochs < 0:
            raise ValueError(f"epochs must be non-negative, got {epochs}")
        history: List[float] = []
        for _ in range(epochs):
            loss = self.network.train_epoch(inputs, targets)
            history.append(loss)
            self._emit_epoch(self.network.epoch, epoch_metrics(self.network, loss))
            if target_loss is not None and math.isfinite(loss) and loss < target_loss:
                break
        return history

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)

    def close(self) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "close"):
                callback.close()  # type: ignore[attr-defined]


__all__ = ["Network", "Trainer", "epoch_metrics"]
