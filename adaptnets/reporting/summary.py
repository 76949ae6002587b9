"""Run summaries built from the progress log and the final training result."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping, Sequence

import numpy as np

from ..core.types import TrainResult


def _series(records: Sequence[Mapping[str, object]], key: str) -> tuple[list[int], np.ndarray]:
    iterations = [int(r.get("iteration", 0)) for r in records if key in r]
    values = np.asarray([float(r[key]) for r in records if key in r], dtype=np.float64)
    return iterations, values


def summarize_progress(
    records: Sequence[Mapping[str, object]], result: TrainResult | None = None
) -> dict:
    """Describe how a run progressed.

    ``records`` are progress records as written by :class:`JsonlSink`. The
    first record's ``error_trend`` has no predecessor and is not counted as
    a sweep direction.
    """

    summary: dict = {
        "version": 2,
        "records": len(records),
        "last_iteration": int(records[-1].get("iteration", 0)) if records else 0,
    }

    iterations, loss = _series(records, "loss")
    if loss.size:
        best = int(np.argmin(loss))
        summary["loss"] = {
            "first": float(loss[0]),
            "last": float(loss[-1]),
            "best": float(loss[best]),
            "best_iteration": iterations[best],
        }

    _, rates = _series(records, "learning_rate")
    if rates.size:
        summary["learning_rate"] = {
            "first": float(rates[0]),
            "last": float(rates[-1]),
            "min": float(np.min(rates)),
            "max": float(np.max(rates)),
        }

    _, trend = _series(records, "error_trend")
    if trend.size > 1:
        trend = trend[1:]
        summary["trend"] = {
            "improving": int(np.sum(trend < 0)),
            "worsening": int(np.sum(trend > 0)),
            "flat": int(np.sum(trend == 0)),
        }

    _, reverts = _series(records, "reverts")
    if reverts.size and summary["last_iteration"] > 0:
        summary["reverts_per_iteration"] = float(reverts[-1]) / summary["last_iteration"]

    if result is not None:
        summary["result"] = {
            "reason": result.reason.value,
            "iterations": result.iterations,
            "learning_rate": result.learning_rate,
            "max_error": result.max_error,
            "reverts": result.reverts,
        }
    return summary


def write_summary(
    metrics_jsonl: str | Path,
    out_summary_json: str | Path,
    *,
    result: TrainResult | None = None,
) -> str:
    """Summarize the progress log at ``metrics_jsonl`` into ``out_summary_json``."""

    metrics_path = Path(metrics_jsonl)
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    records: list[Mapping[str, object]] = []
    if metrics_path.exists():
        for line in metrics_path.read_text().splitlines():
            line = line.strip()
            if line:
                records.append(json.loads(line))

    summary = summarize_progress(records, result)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["summarize_progress", "write_summary"]
