"""nnscope public API."""

from .core import activations, initializers  # noqa: F401
from .core.errors import ConfigurationError, NetworkError, ShapeError, ValidationError
from .core.types import ForwardCache, Gradients, WeightStats
from .serialization import dumps, export_model, import_model, load_model, loads, save_model
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Network, Trainer

__all__ = [
    "ConfigurationError",
    "ForwardCache",
    "Gradients",
    "Network",
    "NetworkError",
    "ShapeError",
    "Trainer",
    "ValidationError",
    "WeightStats",
    "activations",
    "dumps",
    "export_model",
    "import_model",
    "initializers",
    "load_model",
    "load_preset",
    "loads",
    "presets",
    "run_pipeline",
    "save_model",
]
