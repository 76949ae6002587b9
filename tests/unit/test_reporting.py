import json
from pathlib import Path

import numpy as np
import pytest

from adaptnets.core.types import TerminationReason, TrainResult
from adaptnets.reporting.artifacts import CheckpointWriter, load_checkpoint
from adaptnets.reporting.metrics import CsvSink, JsonlSink
from adaptnets.reporting.plots import PlotAdapter
from adaptnets.reporting.summary import write_summary


def test_jsonl_and_csv_sinks(tmp_path):
    jsonl = JsonlSink(tmp_path / "m.jsonl", seed=3, sha="abc")
    csv_sink = CsvSink(tmp_path / "m.csv")
    for iteration, loss in [(10, 0.5), (20, 0.25)]:
        metrics = {"loss": loss, "learning_rate": 2.0}
        jsonl.on_progress(iteration, metrics)
        csv_sink.on_progress(iteration, metrics)

    records = [json.loads(line) for line in jsonl.path.read_text().splitlines()]
    assert [r["iteration"] for r in records] == [10, 20]
    assert records[0]["seed"] == 3 and records[0]["sha"] == "abc"

    rows = (tmp_path / "m.csv").read_text().splitlines()
    assert rows[0] == "iteration,learning_rate,loss"
    assert len(rows) == 3


def test_checkpoint_writer(tmp_path):
    writer = CheckpointWriter(tmp_path / "w.npz")
    weights = [np.arange(6.0).reshape(2, 3), np.ones((3, 1))]
    writer.on_snapshot(5, weights)
    state = load_checkpoint(tmp_path / "w.npz")
    assert sorted(state) == ["W0", "W1"]
    assert np.array_equal(state["W0"], weights[0])
    assert writer.saved == [5]


def test_summary_describes_progress(tmp_path):
    sink = JsonlSink(tmp_path / "m.jsonl", seed=0, sha="x")
    losses = [1.0, 0.5, 0.75, 0.25]
    trends = [0.0, -1.0, 1.0, -1.0]
    rates = [2.0, 4.0, 1.0, 2.0]
    for iteration, (loss, trend, rate) in enumerate(zip(losses, trends, rates), start=1):
        sink.on_progress(
            iteration * 10,
            {"loss": loss, "error_trend": trend, "learning_rate": rate, "reverts": iteration},
        )
    result = TrainResult(
        reason=TerminationReason.ITERATION_EXHAUSTED,
        iterations=40,
        learning_rate=2.0,
        errors=(0.125, 0.125),
        reverts=4,
    )
    first = write_summary(sink.path, tmp_path / "a.json", result=result)
    second = write_summary(sink.path, tmp_path / "b.json", result=result)
    assert first.endswith("a.json") and second.endswith("b.json")
    a = (tmp_path / "a.json").read_text()
    assert a == (tmp_path / "b.json").read_text()

    summary = json.loads(a)
    assert summary["records"] == 4
    assert summary["last_iteration"] == 40
    assert summary["loss"] == {"first": 1.0, "last": 0.25, "best": 0.25, "best_iteration": 40}
    assert summary["learning_rate"] == {"first": 2.0, "last": 2.0, "min": 1.0, "max": 4.0}
    assert summary["trend"] == {"improving": 2, "worsening": 1, "flat": 0}
    assert summary["reverts_per_iteration"] == pytest.approx(0.1)
    assert summary["result"]["reason"] == "iteration_exhausted"
    assert summary["result"]["max_error"] == 0.125


def test_summary_of_empty_log(tmp_path):
    path = write_summary(tmp_path / "missing.jsonl", tmp_path / "s.json")
    summary = json.loads(Path(path).read_text())
    assert summary == {"version": 2, "records": 0, "last_iteration": 0}


def test_plot_adapter_headless(tmp_path):
    pytest.importorskip("matplotlib")
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter.on_progress(1, {"loss": 1.0, "learning_rate": 1.0})
    adapter.on_progress(2, {"loss": 0.5, "learning_rate": 2.0})
    adapter.close()
    assert (tmp_path / "loss.png").exists()


def test_plot_adapter_disabled(tmp_path):
    adapter = PlotAdapter(tmp_path / "plots", enable_plots=False)
    adapter.on_progress(1, {"loss": 1.0})
    assert adapter.close() is None
    assert not (tmp_path / "plots").exists()
