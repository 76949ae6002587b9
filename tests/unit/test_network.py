import numpy as np
import pytest

from adaptnets.core.errors import ConfigurationError, DimensionMismatch
from adaptnets.core.network import Network


def test_weight_shapes_follow_topology():
    net = Network([3, 5, 2], seed=0)
    assert [w.shape for w in net.weights] == [(3, 5), (5, 2)]
    assert [a.shape for a in net.activations] == [(3,), (5,), (2,)]
    assert [d.shape for d in net.deltas] == [(3, 5), (5, 2)]
    assert net.parameter_count() == 25
    assert net.describe().layer_sizes == [3, 5, 2]


def test_random_weights_stay_in_range_and_are_seeded():
    first = Network([4, 6, 3], random_range=(-0.5, 0.25), seed=7)
    second = Network([4, 6, 3], random_range=(-0.5, 0.25), seed=7)
    for a, b in zip(first.weights, second.weights):
        assert np.array_equal(a, b)
        assert np.all(a >= -0.5) and np.all(a < 0.25)


@pytest.mark.parametrize(
    "topology",
    [[3], [], [2, 0, 1], [2, -1]],
)
def test_invalid_topology_is_rejected(topology):
    with pytest.raises(ConfigurationError):
        Network(topology)


def test_inverted_random_range_is_rejected():
    with pytest.raises(ConfigurationError, match="exceeds"):
        Network([2, 1], random_range=(1.0, -1.0))


def test_dense_zero_weights_are_randomized():
    net = Network([2, 1], weights=[[[0.0], [0.5]]], random_range=(1.0, 2.0), seed=0)
    assert 1.0 <= net.weights[0][0, 0] < 2.0
    assert net.weights[0][1, 0] == 0.5


def test_sparse_entries_keep_explicit_zeros():
    net = Network(
        [2, 2, 1],
        weights={(0, 0, 0): 0.0, (1, 1, 0): -0.25},
        random_range=(1.0, 2.0),
        seed=0,
    )
    assert net.weights[0][0, 0] == 0.0
    assert net.weights[1][1, 0] == -0.25
    assert 1.0 <= net.weights[0][1, 1] < 2.0


def test_sparse_entry_outside_topology_is_rejected():
    with pytest.raises(ConfigurationError):
        Network([2, 1], weights={(0, 2, 0): 1.0})
    with pytest.raises(ConfigurationError):
        Network([2, 1], weights={(1, 0, 0): 1.0})


def test_dense_weights_with_wrong_shape_are_rejected():
    with pytest.raises(DimensionMismatch):
        Network([2, 1], weights=[[[1.0, 1.0]]])
    with pytest.raises(DimensionMismatch):
        Network([2, 1], weights=[[[1.0], [1.0]], [[1.0]]])


def test_linear_sum_inference():
    net = Network([2, 1], activation="linear", weights=[[[1.0], [1.0]]])
    out = net.infer([0.3, 0.4])
    assert out.shape == (1,)
    assert out[0] == pytest.approx(0.7, rel=0.0, abs=1e-15)


def test_infer_rejects_wrong_width():
    net = Network([3, 1], seed=0)
    with pytest.raises(DimensionMismatch) as excinfo:
        net.infer([1.0, 2.0])
    assert excinfo.value.expected == 3
    assert excinfo.value.actual == 2


def test_export_weights_is_a_snapshot():
    net = Network([2, 2, 1], seed=1)
    exported = net.export_weights()
    exported[0][0, 0] += 10.0
    assert net.weights[0][0, 0] != exported[0][0, 0]


def test_state_dict_round_trip_and_validation():
    source = Network([2, 3, 1], seed=1)
    target = Network([2, 3, 1], seed=2)
    target.load_state_dict(source.state_dict())
    for a, b in zip(source.weights, target.weights):
        assert np.array_equal(a, b)

    with pytest.raises(KeyError):
        target.load_state_dict({"W0": source.weights[0]})
    with pytest.raises(DimensionMismatch):
        target.load_state_dict({"W0": np.zeros((3, 3)), "W1": np.zeros((3, 1))})


def test_randomize_only_unset_entries():
    net = Network([2, 1], activation="linear", weights={(0, 0, 0): 0.75}, seed=0)
    net.weights[0][1, 0] = 0.0
    net.randomize((5.0, 6.0), only_unset=True)
    assert net.weights[0][0, 0] == 0.75
    assert 5.0 <= net.weights[0][1, 0] < 6.0
    net.randomize()
    assert np.all(net.weights[0] >= 5.0)
