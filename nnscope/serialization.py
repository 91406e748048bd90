"""Export and import of the reproducible network state as one JSON document."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Mapping, Optional, Tuple

import numpy as np

from .core import activations as activation_registry
from .core import initializers as init_registry
from .core.activations import ActivationKind
from .core.errors import ConfigurationError, ValidationError
from .core.initializers import InitKind
from .core.types import Array
from .training import losses as loss_registry
from .training import optimizers as optimizer_registry
from .training.losses import LossKind
from .training.optimizers import OptimizerKind

if TYPE_CHECKING:  # pragma: no cover
    from .training.trainer import Network

REQUIRED_FIELDS = (
    "architecture",
    "activation",
    "optimizer",
    "learningRate",
    "lossHistory",
    "epoch",
    "weights",
    "biases",
)


def export_model(network: "Network") -> dict:
    """Return the live state of ``network`` as plain JSON-compatible data."""

    return {
        "architecture": list(network.architecture),
        "activation": network.activation,
        "optimizer": network.optimizer_name,
        "learningRate": float(network.learning_rate),
        "lossHistory": [float(v) for v in network.loss_history],
        "epoch": int(network.epoch),
        "weights": [W.tolist() for W in network.weights],
        "biases": [b.tolist() for b in network.biases],
        "loss": network.loss,
        "initializer": network.initializer,
        "dropoutRate": float(network.dropout_rate),
    }


@dataclass(frozen=True)
class ParsedModel:
    """Fully validated document contents, ready to apply."""

    architecture: Tuple[int, ...]
    activation: ActivationKind
    optimizer: OptimizerKind
    loss: LossKind
    initializer: InitKind
    learning_rate: float
    loss_history: List[float]
    epoch: int
    dropout_rate: float
    weights: List[Array]
    biases: List[Array]


def _is_int(value: object) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool)


def _to_array(value: object, shape: tuple, what: str) -> Array:
    try:
        arr = np.array(value, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{what} is not a numeric array") from exc
    if arr.shape != shape:
        raise ValidationError(f"{what} has shape {arr.shape}, expected {shape}")
    return arr


def _resolve(registry, value: object, field: str):
    try:
        return registry.resolve(value)
    except ConfigurationError as exc:
        raise ValidationError(f"Field {field!r}: {exc}") from exc


def parse_document(document: Mapping[str, object]) -> ParsedModel:
    """Validate ``document`` without touching any network."""

    if not isinstance(document, Mapping):
        raise ValidationError("Model document must be a mapping")
    missing = [name for name in REQUIRED_FIELDS if name not in document]
    if missing:
        raise ValidationError(f"Model document is missing fields: {', '.join(missing)}")

    arch = document["architecture"]
    if not isinstance(arch, (list, tuple)) or len(arch) < 2:
        raise ValidationError("architecture must list at least two layer widths")
    if not all(_is_int(d) and d >= 1 for d in arch):
        raise ValidationError(f"architecture must hold positive ints, got {arch!r}")
    architecture = tuple(int(d) for d in arch)
    num_layers = len(architecture) - 1

    weights_raw, biases_raw = document["weights"], document["biases"]
    if not isinstance(weights_raw, (list, tuple)) or len(weights_raw) != num_layers:
        raise ValidationError(f"weights must hold {num_layers} layer matrices")
    if not isinstance(biases_raw, (list, tuple)) or len(biases_raw) != num_layers:
        raise ValidationError(f"biases must hold {num_layers} layer vectors")
    weights: List[Array] = []
    biases: List[Array] = []
    for idx in range(num_layers):
        fan_in, fan_out = architecture[idx], architecture[idx + 1]
        weights.append(_to_array(weights_raw[idx], (fan_out, fan_in), f"weights[{idx}]"))
        biases.append(_to_array(biases_raw[idx], (fan_out,), f"biases[{idx}]"))

    lr = document["learningRate"]
    if not _is_number(lr):
        raise ValidationError(f"learningRate must be a number, got {lr!r}")
    try:
        learning_rate = optimizer_registry.check_learning_rate(lr)
    except ConfigurationError as exc:
        raise ValidationError(str(exc)) from exc

    history = document["lossHistory"]
    if not isinstance(history, (list, tuple)) or not all(_is_number(v) for v in history):
        raise ValidationError("lossHistory must be a list of numbers")
    epoch = document["epoch"]
    if not _is_int(epoch) or epoch < 0:
        raise ValidationError(f"epoch must be a non-negative int, got {epoch!r}")

    dropout = document.get("dropoutRate", 0.0)
    if not _is_number(dropout) or not 0.0 <= float(dropout) < 1.0:
        raise ValidationError(f"dropoutRate must lie in [0, 1), got {dropout!r}")

    return ParsedModel(
        architecture=architecture,
        activation=_resolve(activation_registry.REGISTRY, document["activation"], "activation"),
        optimizer=_resolve(optimizer_registry.REGISTRY, document["optimizer"], "optimizer"),
        loss=_resolve(loss_registry.REGISTRY, document.get("loss", "mse"), "loss"),
        initializer=_resolve(init_registry.REGISTRY, document.get("initializer", "xavier"), "initializer"),
        learning_rate=learning_rate,
        loss_history=[float(v) for v in history],
        epoch=int(epoch),
        dropout_rate=float(dropout),
        weights=weights,
        biases=biases,
    )


def _apply(network: "Network", parsed: ParsedModel) -> None:
    network.params.load(parsed.weights, parsed.biases)
    network.set_activation(parsed.activation)
    network.set_loss(parsed.loss)
    network.set_initializer(parsed.initializer)
    network.set_dropout_rate(parsed.dropout_rate)
    network.set_optimizer(parsed.optimizer, parsed.learning_rate)
    network.loss_history = list(parsed.loss_history)
    network.epoch = parsed.epoch
    network.gradients = None
    network.last_cache = None


def import_model(network: "Network", document: Mapping[str, object]) -> None:
    """Replace the state of ``network`` with ``document``.

    The document's architecture must match the network's. The initial
    snapshot is reset to the imported values. On any validation failure the
    network is left untouched.
    """

    parsed = parse_document(document)
    if parsed.architecture != network.architecture:
        raise ValidationError(
            f"Document architecture {list(parsed.architecture)} does not match "
            f"network architecture {list(network.architecture)}"
        )
    _apply(network, parsed)


def network_from_document(document: Mapping[str, object], *, seed: Optional[int] = None) -> "Network":
    from .training.trainer import Network

    parsed = parse_document(document)
    network = Network(
        parsed.architecture,
        parsed.activation,
        parsed.optimizer,
        parsed.learning_rate,
        loss=parsed.loss,
        init=parsed.initializer,
        seed=seed,
    )
    _apply(network, parsed)
    return network


def dumps(network: "Network", *, indent: Optional[int] = None) -> str:
    # allow_nan keeps diverged runs exportable as NaN/Infinity tokens
    return json.dumps(export_model(network), indent=indent, allow_nan=True)


def loads(text: str) -> Mapping[str, object]:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Model document is not valid JSON: {exc}") from exc
    return document


def save_model(network: "Network", path: str | Path) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(network, indent=2))
    return str(path)


def load_model(path: str | Path, *, seed: Optional[int] = None) -> "Network":
    return network_from_document(loads(Path(path).read_text()), seed=seed)


__all__ = [
    "dumps",
    "export_model",
    "import_model",
    "load_model",
    "loads",
    "network_from_document",
    "parse_document",
    "save_model",
]
