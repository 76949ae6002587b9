"""Run artifacts: weight checkpoints and the reproducibility manifest."""

from __future__ import annotations

import json
import os
import subprocess
import time
from pathlib import Path
from typing import Mapping, Sequence

import numpy as np

from ..core.types import Array, TrainResult


def git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except Exception:  # pragma: no cover - git may be unavailable in tests
        return "unknown"


def save_checkpoint(path: str | Path, weights: Sequence[Array]) -> Path:
    """Write ``weights`` to a compressed ``.npz`` archive keyed ``W0``, ``W1``..."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {f"W{idx}": np.asarray(W) for idx, W in enumerate(weights)}
    with path.open("wb") as handle:
        np.savez_compressed(handle, **payload)
    return path


def load_checkpoint(path: str | Path) -> dict[str, Array]:
    """Read a checkpoint written by :func:`save_checkpoint`."""

    with np.load(Path(path)) as archive:
        return {name: archive[name].copy() for name in archive.files}


class CheckpointWriter:
    """Training callback that persists weight snapshots."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.saved: list[int] = []

    def on_snapshot(self, iteration: int, weights: Sequence[Array]) -> None:
        save_checkpoint(self.path, weights)
        self.saved.append(int(iteration))


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    training_set: Mapping[str, object],
    result: TrainResult,
) -> str:
    """Write a manifest JSON file describing how the run ended."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "git_sha": git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": config,
        "training_set": dict(training_set),
        "result": {
            "reason": result.reason.value,
            "iterations": result.iterations,
            "learning_rate": result.learning_rate,
            "reverts": result.reverts,
            "errors": list(result.errors),
        },
        "environment": {
            "python": os.environ.get("PYTHON_VERSION", "unknown"),
        },
    }
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)


__all__ = [
    "CheckpointWriter",
    "git_sha",
    "load_checkpoint",
    "save_checkpoint",
    "write_manifest",
]
