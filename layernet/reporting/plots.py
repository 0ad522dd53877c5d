"""Opt-in training curve plot."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class PlotAdapter:
    """Record ``loss`` and ``error`` per epoch and draw them to ``training.png``.

    Nothing is recorded or written unless ``enable_plots`` is set.
    """

    filename = "training.png"

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float, float]] = []

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if self.enable_plots:
            self._history.append((epoch, float(metrics["loss"]), float(metrics["error"])))

    __call__ = on_epoch

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt

        epochs, losses, errors = zip(*self._history)
        fig, (loss_ax, error_ax) = plt.subplots(2, 1, sharex=True, figsize=(6, 6))
        loss_ax.plot(epochs, losses)
        if min(losses) > 0:
            loss_ax.set_yscale("log")
        loss_ax.set_ylabel("Mean squared residual")
        error_ax.plot(epochs, errors, color="tab:orange")
        error_ax.axhline(0.0, color="grey", linewidth=0.5)
        error_ax.set_ylabel("Residual sum")
        error_ax.set_xlabel("Epoch")
        fig.tight_layout()

        self.run_dir.mkdir(parents=True, exist_ok=True)
        plot_path = self.run_dir / self.filename
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path
