import json
from pathlib import Path

import pytest

from cli.main import main


def _json_lines(text: str) -> list[dict]:
    return [json.loads(line) for line in text.splitlines() if line.startswith("{")]


def test_cli_sum_linear_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "sum-linear", "--infer", "0.3,0.4", "--infer", "1,1"])
    run_dir = Path("runs/sum-linear")
    assert (run_dir / "metrics.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    assert (run_dir / "weights.npz").exists()

    lines = _json_lines(capsys.readouterr().out)
    assert lines[0]["reason"] == "converged"
    assert lines[0]["iterations"] == 1
    assert lines[1]["inputs"] == [0.3, 0.4]
    assert lines[1]["outputs"][0] == pytest.approx(0.7)
    assert lines[2]["outputs"][0] == pytest.approx(2.0)


def test_cli_overrides_and_dump_config(tmp_path, capsys):
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"train": {"progress_period": 1}}))
    dumped = tmp_path / "resolved.json"
    main(
        [
            "--preset",
            "xor",
            "--config",
            str(override),
            "--max-iterations",
            "3",
            "--seed",
            "5",
            "--run-dir",
            str(tmp_path / "xor"),
            "--dump-config",
            str(dumped),
        ]
    )
    resolved = json.loads(dumped.read_text())
    assert resolved["train"]["max_iterations"] == 3
    assert resolved["train"]["seed"] == 5
    assert resolved["train"]["progress_period"] == 1

    result = _json_lines(capsys.readouterr().out)[0]
    assert result["iterations"] <= 3
    records = (tmp_path / "xor" / "metrics.jsonl").read_text().splitlines()
    assert len(records) == result["iterations"]


def test_cli_infer_file(tmp_path):
    (tmp_path / "in.txt").write_text("0.25 0.5\n")
    out = tmp_path / "out.txt"
    main(
        [
            "--preset",
            "sum-linear",
            "--run-dir",
            str(tmp_path / "run"),
            "--infer-file",
            str(tmp_path / "in.txt"),
            "--output-file",
            str(out),
        ]
    )
    assert float(out.read_text().split()[0]) == pytest.approx(0.75)


def test_cli_list_presets(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--list-presets"])
    assert excinfo.value.code == 0
    names = capsys.readouterr().out.split()
    assert "xor" in names and "sum-linear" in names
