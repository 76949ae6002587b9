import numpy as np
import pytest

from adaptnets.core import activations
from adaptnets.core.errors import ConfigurationError


def test_linear_is_identity_with_unit_derivative():
    f = activations.Linear()
    x = np.array([-3.5, 0.0, 2.25])
    assert np.array_equal(f.activate(x), x)
    assert np.array_equal(f.derivative(x), np.ones(3))
    assert np.array_equal(f.derivative_from_output(f.activate(x)), np.ones(3))


def test_logistic_values():
    f = activations.Logistic()
    assert f.activate(np.array([0.0]))[0] == 0.5
    assert f.activate(np.array([50.0]))[0] == 1.0
    assert f.activate(np.array([-800.0]))[0] == 0.0


def test_sigmoid_derivative_identity():
    f = activations.Logistic()
    x = np.linspace(-20.0, 20.0, 401)
    y = 1.0 / (1.0 + np.exp(-x))
    expected = y * (1.0 - y)
    assert np.allclose(f.derivative(x), expected, rtol=0.0, atol=1e-12)
    assert np.allclose(f.derivative_from_output(f.activate(x)), expected, rtol=0.0, atol=1e-12)


def test_registry_resolves_names_and_rejects_unknown():
    assert activations.get("sigmoid").name == "logistic"
    assert activations.get(" Linear ").name == "linear"
    custom = activations.Linear()
    assert activations.get(custom) is custom
    assert activations.available() == ["linear", "logistic", "sigmoid"]
    with pytest.raises(ConfigurationError, match="linear, logistic, sigmoid"):
        activations.get("tanh")
