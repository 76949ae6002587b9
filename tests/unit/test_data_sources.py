import numpy as np
import pytest

from adaptnets import data
from adaptnets.core.errors import ConfigurationError, DimensionMismatch
from adaptnets.core.types import TrainingSet


def test_truth_table_enumerates_all_inputs():
    ts = data.get("truth_table", [2, 3, 1], function="xor")
    assert len(ts) == 4
    pairs = [(tuple(ex.inputs), tuple(ex.targets)) for ex in ts]
    assert pairs == [
        ((0.0, 0.0), (0.0,)),
        ((0.0, 1.0), (1.0,)),
        ((1.0, 0.0), (1.0,)),
        ((1.0, 1.0), (0.0,)),
    ]
    assert ts.provenance["function"] == "xor"


def test_truth_table_repeats_target_on_every_output():
    ts = data.get("truth_table", [3, 2], function="and")
    assert len(ts) == 8
    last = ts.examples[-1]
    assert np.array_equal(last.targets, [1.0, 1.0])
    assert all(ex.targets.sum() == 0.0 for ex in ts.examples[:-1])


def test_truth_table_unknown_function():
    with pytest.raises(ConfigurationError):
        data.get("truth_table", [2, 1], function="implies")


def test_cases_source_validates_widths():
    ts = data.get("cases", [2, 1], cases=[[[0.3, 0.4], [0.7]]])
    assert ts.input_width == 2 and ts.output_width == 1

    with pytest.raises(ConfigurationError):
        data.get("cases", [2, 1], cases=[[[0.3], [0.7]]])
    with pytest.raises(ConfigurationError):
        data.get("cases", [2, 1], cases=[[[0.3, 0.4]]])


def test_short_input_raises_before_training():
    with pytest.raises(DimensionMismatch) as excinfo:
        TrainingSet.from_pairs([([1.0, 0.0], [1.0]), ([1.0], [0.0])], [2, 2, 1])
    assert isinstance(excinfo.value, ConfigurationError)
    assert "training example 1 inputs" in str(excinfo.value)


def test_empty_training_set_is_rejected():
    with pytest.raises(ConfigurationError):
        TrainingSet.from_pairs([], [2, 1])


def test_unknown_source():
    with pytest.raises(ValueError, match="Unknown training-set source"):
        data.get("mnist", [784, 10])


def test_pel_files_round_trip(tmp_path):
    image = np.array([[0.0, 255.0, 0.0], [255.0, 0.0, 255.0]])
    data.write_pels(tmp_path / "x.txt", image, row_width=3)
    (tmp_path / "y.txt").write_text("1 0\n")

    text = (tmp_path / "x.txt").read_text().splitlines()
    assert len(text) == 2

    ts = data.get(
        "pels",
        [6, 4, 2],
        cases=[["x.txt", "y.txt"]],
        root=str(tmp_path),
        scale=255.0,
    )
    assert np.allclose(ts.examples[0].inputs, [0, 1, 0, 1, 0, 1])
    assert np.array_equal(ts.examples[0].targets, [1.0, 0.0])


def test_pel_file_too_short(tmp_path):
    (tmp_path / "short.txt").write_text("0.1 0.2\n")
    with pytest.raises(DimensionMismatch):
        data.read_pels(tmp_path / "short.txt", 3)


def test_pel_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        data.read_pels(tmp_path / "missing.txt", 3)


def test_pel_file_with_ragged_last_row(tmp_path):
    path = data.write_pels(tmp_path / "r.txt", [1.0, 2.0, 3.0, 4.0, 5.0], row_width=2)
    assert path.read_text().splitlines()[-1] == "5.0"
    assert np.array_equal(data.read_pels(path), [1.0, 2.0, 3.0, 4.0, 5.0])
    assert np.array_equal(data.read_pels(path, 3), [1.0, 2.0, 3.0])
