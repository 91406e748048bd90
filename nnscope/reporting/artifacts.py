"""Reproducibility metadata written next to every run."""

from __future__ import annotations

import json
import os
import platform
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Mapping

import numpy as np

RUN_ROOT_ENV = "NNSCOPE_RUN_ROOT"


def git_sha() -> str:
    """Commit of the current checkout, or ``"unknown"`` outside of git."""

    try:
        proc = subprocess.run(
            ["git", "rev-parse", "--short=12", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
    return proc.stdout.strip() or "unknown"


def environment() -> Dict[str, str]:
    return {
        "python": platform.python_version(),
        "platform": platform.platform(terse=True),
        "numpy": np.__version__,
        "run_root": os.environ.get(RUN_ROOT_ENV, "runs"),
    }


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
    network: Mapping[str, object] | None = None,
) -> str:
    """Record what was trained, on which data, from which commit."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "created": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "git_sha": git_sha(),
        "dataset": dict(dataset_provenance),
        "network": dict(network or {}),
        "config": config,
        "environment": environment(),
    }
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)


__all__ = ["RUN_ROOT_ENV", "environment", "git_sha", "write_manifest"]
