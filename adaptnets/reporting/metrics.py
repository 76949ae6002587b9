"""Progress sinks for training runs."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Mapping

from .artifacts import git_sha


class JsonlSink:
    """Append-only JSONL writer for progress records."""

    def __init__(
        self,
        path: str | Path,
        *,
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.seed = seed
        self.sha = sha or git_sha()

    def on_progress(self, iteration: int, metrics: Mapping[str, float]) -> None:
        record = {"iteration": int(iteration), "seed": self.seed, "sha": self.sha}
        record.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_progress


class CsvSink:
    """Write progress records to CSV with a stable schema."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")

    def on_progress(self, iteration: int, metrics: Mapping[str, float]) -> None:
        row = {"iteration": int(iteration)}
        row.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=sorted(row.keys()))
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)


class MetricsCapture:
    """Keep progress records in memory."""

    def __init__(self) -> None:
        self.history: list[tuple[int, Mapping[str, float]]] = []
        self.snapshots: list[int] = []
        self.result = None

    def on_progress(self, iteration: int, metrics: Mapping[str, float]) -> None:
        self.history.append((int(iteration), {k: float(v) for k, v in metrics.items()}))

    def on_snapshot(self, iteration: int, weights) -> None:
        self.snapshots.append(int(iteration))

    def on_end(self, result) -> None:
        self.result = result

    @property
    def last(self) -> Mapping[str, float]:
        return self.history[-1][1] if self.history else {}


__all__ = ["CsvSink", "JsonlSink", "MetricsCapture"]
