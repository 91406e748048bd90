"""Training data for nnscope runs."""

from .functions import Dataset, make_dataset, names

__all__ = ["Dataset", "make_dataset", "names"]
