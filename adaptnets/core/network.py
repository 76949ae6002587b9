"""Network state: topology, weights and per-layer buffers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Mapping, Sequence, Tuple

import numpy as np

from . import activations as _activations
from .errors import ConfigurationError, DimensionMismatch
from .types import Array, NetworkDescription, Topology, as_vector, validate_topology

if TYPE_CHECKING:  # pragma: no cover
    from .types import Hyperparameters, TrainingSet, TrainResult

WeightIndex = Tuple[int, int, int]
WeightSpec = Sequence[Sequence[Sequence[float]]] | Mapping[WeightIndex, float]


def _check_range(random_range: Sequence[float]) -> Tuple[float, float]:
    low, high = (float(v) for v in random_range)
    if low > high:
        raise ConfigurationError(f"random_range min {low} exceeds max {high}")
    return low, high


class Network:
    """Feed-forward network with preallocated per-layer buffers.

    ``weights[n]`` has shape ``(layer_sizes[n], layer_sizes[n + 1])`` and
    ``weights[n][j, i]`` connects unit ``j`` of layer ``n`` to unit ``i`` of
    layer ``n + 1``. Initial weights are randomized uniformly on
    ``[min, max)`` when absent. A dense weight specification treats an
    entry of exactly ``0.0`` as unset; a mapping of ``(n, j, i) -> value``
    keeps every listed entry, zeros included.
    """

    def __init__(
        self,
        topology: Sequence[int],
        activation: str | _activations.Activation = "logistic",
        weights: WeightSpec | None = None,
        random_range: Sequence[float] = (-1.0, 1.0),
        seed: int | None = None,
    ) -> None:
        sizes = validate_topology(topology)
        self.activation = _activations.get(activation)
        self.random_range = _check_range(random_range)
        self._rng = np.random.default_rng(seed)

        shapes = [(sizes[n], sizes[n + 1]) for n in range(len(sizes) - 1)]
        if weights is None:
            given = [np.zeros(shape) for shape in shapes]
            unset = [np.ones(shape, dtype=bool) for shape in shapes]
        elif isinstance(weights, Mapping):
            given, unset = _from_entries(weights, shapes)
        else:
            given = _from_dense(weights, shapes)
            unset = [matrix == 0.0 for matrix in given]

        self.topology: Topology = sizes
        self.weights: List[Array] = given
        self._fill(unset)

        self.activations: List[Array] = [np.zeros(size) for size in sizes]
        self.weighted_sums: List[Array] = [np.zeros(size) for size in sizes]
        self.psi: List[Array] = [np.zeros(size) for size in sizes]
        self.deltas: List[Array] = [np.zeros(shape) for shape in shapes]

    # ------------------------------------------------------------------
    # Shape helpers

    @property
    def layer_sizes(self) -> Topology:
        return self.topology

    @property
    def input_width(self) -> int:
        return self.topology[0]

    @property
    def output_width(self) -> int:
        return self.topology[-1]

    def describe(self) -> NetworkDescription:
        return NetworkDescription(
            layer_sizes=list(self.topology),
            activation=self.activation.name,
            parameter_count=self.parameter_count(),
        )

    def parameter_count(self) -> int:
        return int(sum(int(w.size) for w in self.weights))

    # ------------------------------------------------------------------
    # Weights

    def randomize(
        self,
        random_range: Sequence[float] | None = None,
        *,
        only_unset: bool = False,
    ) -> None:
        """Redraw weights uniformly on ``[min, max)``.

        With ``only_unset`` only entries that are exactly ``0.0`` are redrawn.
        """

        if random_range is not None:
            self.random_range = _check_range(random_range)
        if only_unset:
            mask = [w == 0.0 for w in self.weights]
        else:
            mask = [np.ones(w.shape, dtype=bool) for w in self.weights]
        self._fill(mask)

    def _fill(self, masks: Iterable[Array]) -> None:
        low, high = self.random_range
        for W, mask in zip(self.weights, masks):
            draws = self._rng.uniform(low, high, size=W.shape)
            W[mask] = draws[mask]

    def export_weights(self) -> List[Array]:
        """Return a snapshot of the weight tensor."""

        return [W.copy() for W in self.weights]

    def state_dict(self) -> dict[str, Array]:
        return {f"W{idx}": W.copy() for idx, W in enumerate(self.weights)}

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        loaded = []
        for idx, W in enumerate(self.weights):
            key = f"W{idx}"
            if key not in state:
                raise KeyError(f"Missing weight {key} in state dict")
            value = np.asarray(state[key], dtype=np.float64)
            if value.shape != W.shape:
                raise DimensionMismatch(f"weight matrix {key}", W.shape, value.shape)
            loaded.append(value.copy())
        for W, value in zip(self.weights, loaded):
            W[...] = value

    # ------------------------------------------------------------------
    # Running

    def infer(self, inputs: Iterable[float] | Array) -> Array:
        """Run a forward pass and return a copy of the output vector."""

        from .propagation import forward

        return forward(self, as_vector(inputs)).outputs.copy()

    def train(
        self,
        training_set: "TrainingSet",
        hyperparameters: "Hyperparameters",
        **kwargs,
    ) -> "TrainResult":
        """Train in place with :class:`~adaptnets.training.trainer.AdaptiveTrainer`."""

        from ..training.trainer import AdaptiveTrainer

        return AdaptiveTrainer(self, hyperparameters, **kwargs).run(training_set)

    def __repr__(self) -> str:
        return f"Network(topology={list(self.topology)}, activation={self.activation!r})"


def _from_dense(weights: Sequence, shapes: Sequence[Tuple[int, int]]) -> List[Array]:
    if len(weights) != len(shapes):
        raise DimensionMismatch("number of weight matrices", len(shapes), len(weights))
    matrices = []
    for n, (matrix, shape) in enumerate(zip(weights, shapes)):
        value = np.array(matrix, dtype=np.float64)
        if value.shape != shape:
            raise DimensionMismatch(f"weight matrix {n}", shape, value.shape)
        matrices.append(value)
    return matrices


def _from_entries(
    entries: Mapping[WeightIndex, float], shapes: Sequence[Tuple[int, int]]
) -> Tuple[List[Array], List[Array]]:
    matrices = [np.zeros(shape) for shape in shapes]
    unset = [np.ones(shape, dtype=bool) for shape in shapes]
    for key, value in entries.items():
        n, j, i = (int(k) for k in key)
        if not 0 <= n < len(shapes):
            raise ConfigurationError(f"Weight {key}: layer {n} does not exist")
        rows, cols = shapes[n]
        if not (0 <= j < rows and 0 <= i < cols):
            raise ConfigurationError(
                f"Weight {key}: unit index outside matrix {n} of shape {shapes[n]}"
            )
        matrices[n][j, i] = float(value)
        unset[n][j, i] = False
    return matrices, unset


__all__ = ["Network"]
