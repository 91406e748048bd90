"""Per-epoch record sinks: JSON lines for tooling, CSV for spreadsheets.

Both sinks accept the flat mapping produced by
:func:`nnscope.training.trainer.epoch_metrics`. Diverged values are written
as they are (``NaN``/``Infinity`` tokens in JSON, ``nan``/``inf`` in CSV).
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, Mapping, Optional

from .artifacts import git_sha


def _numeric(metrics: Mapping[str, object]) -> Dict[str, float]:
    return {
        key: float(value)
        for key, value in metrics.items()
        if isinstance(value, (int, float)) and not isinstance(value, bool)
    }


class JsonlSink:
    """Write one JSON object per epoch, tagged with the seed and commit."""

    def __init__(self, path: str | Path, *, seed: int | None = None, sha: str | None = None) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.seed = seed
        self.sha = sha or git_sha()
        self._handle = self.path.open("w", encoding="utf-8")

    def on_epoch(self, epoch: int, metrics: Mapping[str, object]) -> None:
        record = {"epoch": int(epoch), "seed": self.seed, "sha": self.sha, **_numeric(metrics)}
        self._handle.write(json.dumps(record) + "\n")
        self._handle.flush()

    def close(self) -> None:
        self._handle.close()

    __call__ = on_epoch


class CsvSink:
    """CSV with the columns fixed by the first epoch written."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self.path.open("w", encoding="utf-8", newline="")
        self._writer: Optional[csv.DictWriter] = None

    def on_epoch(self, epoch: int, metrics: Mapping[str, object]) -> None:
        row = {"epoch": int(epoch), **_numeric(metrics)}
        if self._writer is None:
            self._writer = csv.DictWriter(self._handle, fieldnames=list(row), extrasaction="ignore")
            self._writer.writeheader()
        self._writer.writerow(row)
        self._handle.flush()

    def close(self) -> None:
        self._handle.close()

    __call__ = on_epoch


__all__ = ["CsvSink", "JsonlSink"]
