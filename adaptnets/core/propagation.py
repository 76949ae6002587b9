"""Forward propagation and error back-propagation."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .errors import DimensionMismatch
from .network import Network
from .types import Array, ForwardResult


def forward(network: Network, inputs: Array, *, check: bool = True) -> ForwardResult:
    """Propagate ``inputs`` through ``network``.

    Results are written into the network's activation and weighted-sum
    buffers; the returned :class:`ForwardResult` references those buffers
    and is only valid until the next pass. The training loop disables
    ``check`` because its examples were validated up front.
    """

    if check and np.shape(inputs) != (network.input_width,):
        raise DimensionMismatch("input vector", network.input_width, int(np.size(inputs)))

    acts = network.activations
    sums = network.weighted_sums
    f = network.activation
    sums[0][:] = inputs
    acts[0][:] = inputs
    for n, W in enumerate(network.weights, start=1):
        np.dot(acts[n - 1], W, out=sums[n])
        acts[n][:] = f.activate(sums[n])
    return ForwardResult(activations=acts, weighted_sums=sums)


def example_error(outputs: Array, expected: Array) -> float:
    """Return ``0.5 * sum((expected - outputs) ** 2)``."""

    omega = expected - outputs
    return 0.5 * float(np.dot(omega, omega))


def backward(
    network: Network,
    result: ForwardResult,
    expected: Array,
    learning_rate: float,
    *,
    check: bool = True,
) -> List[Array]:
    """Compute the weight deltas for one example.

    ``psi`` at the output is ``(expected - output) * f'``; hidden layers get
    ``omega = W @ psi_next`` and ``psi = omega * f'``. The input layer has no
    error signal of its own. Every delta is computed from the weights as
    they stood during the forward pass; nothing is applied here.
    """

    if check and np.shape(expected) != (network.output_width,):
        raise DimensionMismatch(
            "expected output vector", network.output_width, int(np.size(expected))
        )

    acts = result.activations
    psi = network.psi
    deltas = network.deltas
    weights = network.weights
    f = network.activation
    last = len(weights)

    psi[last][:] = (expected - acts[last]) * f.derivative_from_output(acts[last])
    for n in range(last - 1, -1, -1):
        np.multiply(learning_rate, np.outer(acts[n], psi[n + 1]), out=deltas[n])
        if n > 0:
            omega = weights[n] @ psi[n + 1]
            psi[n][:] = omega * f.derivative_from_output(acts[n])
    return deltas


def apply_deltas(network: Network, deltas: Sequence[Array]) -> None:
    for W, delta in zip(network.weights, deltas):
        W += delta


def revert_deltas(network: Network, deltas: Sequence[Array]) -> None:
    """Undo :func:`apply_deltas` by subtracting the same delta tensor."""

    for W, delta in zip(network.weights, deltas):
        W -= delta


__all__ = ["apply_deltas", "backward", "example_error", "forward", "revert_deltas"]
