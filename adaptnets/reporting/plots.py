"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple


class PlotAdapter:
    """Collect progress records and optionally emit a matplotlib loss curve."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_progress(self, iteration: int, metrics):
        if not self.enable_plots:
            return
        loss = float(metrics.get("loss", 0.0))
        rate = float(metrics.get("learning_rate", 0.0))
        self._history.append((iteration, loss, rate))

    def on_end(self, result) -> None:
        self.close()

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        iterations, losses, rates = zip(*self._history)
        fig, (ax_loss, ax_rate) = plt.subplots(2, 1, sharex=True)
        ax_loss.plot(iterations, losses)
        ax_loss.set_ylabel("Total error")
        ax_loss.set_title("Training Curve")
        ax_rate.plot(iterations, rates)
        ax_rate.set_yscale("log")
        ax_rate.set_xlabel("Iteration")
        ax_rate.set_ylabel("Learning rate")
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path

    __call__ = on_progress
