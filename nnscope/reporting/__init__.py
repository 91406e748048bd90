"""Run artifacts: metric sinks, plots, manifests and summaries."""

from .artifacts import write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import build_summary, write_summary

__all__ = ["CsvSink", "JsonlSink", "PlotAdapter", "build_summary", "write_manifest", "write_summary"]
