"""Core numerical primitives for AdaptNets."""

from . import activations, errors, network, propagation, types

__all__ = ["activations", "errors", "network", "propagation", "types"]
