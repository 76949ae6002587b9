"""Exception hierarchy for AdaptNets."""

from __future__ import annotations


class AdaptNetsError(Exception):
    """Base class for all errors raised by AdaptNets."""


class ConfigurationError(AdaptNetsError, ValueError):
    """The network, training set or hyperparameters are inconsistent."""


class DimensionMismatch(ConfigurationError):
    """A vector or matrix does not match the dimension the topology requires."""

    def __init__(self, what: str, expected: object, actual: object) -> None:
        self.what = what
        self.expected = expected
        self.actual = actual
        super().__init__(f"{what}: expected {expected}, got {actual}")


__all__ = ["AdaptNetsError", "ConfigurationError", "DimensionMismatch"]
