"""Training curves rendered with matplotlib's headless backend."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Dict, List, Sequence

from ..core.stats import GRAD_NORM_PREFIX


def _log_scale_ok(values: Sequence[float]) -> bool:
    return bool(values) and all(math.isfinite(v) and v > 0 for v in values)


class PlotAdapter:
    """Collect the loss and per-layer gradient norms, draw them on close.

    The lower panel makes vanishing (norms shrinking toward the input layer)
    and exploding gradients visible at a glance.
    """

    def __init__(self, run_dir: str | Path, enable_plots: bool = False, filename: str = "loss.png"):
        self.run_dir = Path(run_dir)
        self.enable_plots = enable_plots
        self.filename = filename
        self.epochs: List[int] = []
        self.losses: List[float] = []
        self.grad_norms: Dict[int, List[float]] = {}

    def on_epoch(self, epoch: int, metrics) -> None:
        if not self.enable_plots:
            return
        self.epochs.append(int(epoch))
        self.losses.append(float(metrics.get("loss", math.nan)))
        for key, value in metrics.items():
            if key.startswith(GRAD_NORM_PREFIX):
                layer = int(key[len(GRAD_NORM_PREFIX):])
                self.grad_norms.setdefault(layer, []).append(float(value))

    def close(self) -> str | None:
        if not self.enable_plots or not self.epochs:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt

        panels = 2 if self.grad_norms else 1
        fig, axes = plt.subplots(panels, 1, sharex=True, figsize=(6, 3 * panels), squeeze=False)
        loss_ax = axes[0][0]
        loss_ax.plot(self.epochs, self.losses)
        loss_ax.set_ylabel("Loss")
        loss_ax.set_title("Training Curve")
        if _log_scale_ok(self.losses):
            loss_ax.set_yscale("log")

        if self.grad_norms:
            grad_ax = axes[1][0]
            all_norms: List[float] = []
            for layer, norms in sorted(self.grad_norms.items()):
                grad_ax.plot(self.epochs[: len(norms)], norms, label=f"layer {layer}")
                all_norms.extend(norms)
            grad_ax.set_ylabel("|dL/dW|")
            grad_ax.legend(loc="best", fontsize="small")
            if _log_scale_ok(all_norms):
                grad_ax.set_yscale("log")
        axes[-1][0].set_xlabel("Epoch")

        self.run_dir.mkdir(parents=True, exist_ok=True)
        path = self.run_dir / self.filename
        fig.tight_layout()
        fig.savefig(path)
        plt.close(fig)
        return str(path)

    __call__ = on_epoch


__all__ = ["PlotAdapter"]
