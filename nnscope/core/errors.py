"""Exception hierarchy raised by the network core."""

from __future__ import annotations


class NetworkError(Exception):
    """Base class for errors raised by :mod:`nnscope`."""


class ConfigurationError(NetworkError, ValueError):
    """Unknown strategy name or an invalid hyperparameter.

    Raised by the call that attempted the change; the previous configuration
    remains active.
    """


class ShapeError(NetworkError, ValueError):
    """Input or target width does not match the architecture."""


class ValidationError(NetworkError, ValueError):
    """A model document is malformed or inconsistent with its architecture."""


__all__ = ["NetworkError", "ConfigurationError", "ShapeError", "ValidationError"]
