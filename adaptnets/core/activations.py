"""Activation functions for AdaptNets."""

from __future__ import annotations

from typing import Dict, Protocol

import numpy as np

from .errors import ConfigurationError
from .types import Array


class Activation(Protocol):
    """Protocol implemented by unit activation functions."""

    name: str

    def activate(self, x: Array) -> Array:
        """Map weighted sums to activation values."""

    def derivative(self, weighted_sum: Array) -> Array:
        """Return the derivative evaluated at ``weighted_sum``."""

    def derivative_from_output(self, y: Array) -> Array:
        """Return the derivative given the already computed activation ``y``."""


class Linear:
    """Identity activation, ``f(x) = x``."""

    name = "linear"

    def activate(self, x: Array) -> Array:
        return np.asarray(x, dtype=np.float64)

    def derivative(self, weighted_sum: Array) -> Array:
        return np.ones_like(weighted_sum, dtype=np.float64)

    def derivative_from_output(self, y: Array) -> Array:
        return np.ones_like(y, dtype=np.float64)

    def __repr__(self) -> str:
        return "Linear()"


class Logistic:
    """Sigmoid activation, ``f(x) = 1 / (1 + e^-x)``.

    The derivative is always expressed through the activation value as
    ``f * (1 - f)`` so back-propagation can reuse the forward buffers.
    """

    name = "logistic"

    def activate(self, x: Array) -> Array:
        # e^-x overflows to inf for very negative x, which yields 0.0.
        with np.errstate(over="ignore"):
            return 1.0 / (1.0 + np.exp(-np.asarray(x, dtype=np.float64)))

    def derivative(self, weighted_sum: Array) -> Array:
        return self.derivative_from_output(self.activate(weighted_sum))

    def derivative_from_output(self, y: Array) -> Array:
        return y * (1.0 - y)

    def __repr__(self) -> str:
        return "Logistic()"


_REGISTRY: Dict[str, Activation] = {
    "linear": Linear(),
    "logistic": Logistic(),
    "sigmoid": Logistic(),
}


def get(name: str | Activation) -> Activation:
    """Resolve ``name`` to an activation instance."""

    if not isinstance(name, str):
        return name
    try:
        return _REGISTRY[name.strip().lower()]
    except KeyError:
        choices = ", ".join(available())
        raise ConfigurationError(
            f"Unknown activation '{name}' (expected one of: {choices})"
        ) from None


def available() -> list[str]:
    """Names accepted by :func:`get`."""

    return sorted(_REGISTRY)


__all__ = ["Activation", "Linear", "Logistic", "available", "get"]
