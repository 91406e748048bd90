"""Core numerical primitives for nnscope."""

from . import activations, backprop, errors, forward, initializers, params, stats, types

__all__ = [
    "activations",
    "backprop",
    "errors",
    "forward",
    "initializers",
    "params",
    "stats",
    "types",
]
