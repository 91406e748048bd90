"""Training driver, optimizers, losses and pipelines."""

from .losses import Loss, LossKind
from .optimizers import OptimizerKind, make_optimizer
from .trainer import Network, Trainer

__all__ = ["Loss", "LossKind", "Network", "OptimizerKind", "Trainer", "make_optimizer"]
