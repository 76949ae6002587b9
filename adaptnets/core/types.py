"""Core typing contracts for AdaptNets."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError, DimensionMismatch

Array = np.ndarray

Topology = Tuple[int, ...]


def as_vector(values: Iterable[float] | Array) -> Array:
    """Return ``values`` as a flat float64 vector."""

    return np.asarray(values, dtype=np.float64).reshape(-1)


def validate_topology(layer_sizes: Sequence[int]) -> Topology:
    """Return ``layer_sizes`` as an immutable topology or raise."""

    sizes = tuple(int(size) for size in layer_sizes)
    if len(sizes) < 2:
        raise ConfigurationError(
            f"Topology needs at least an input and an output layer, got {list(sizes)}"
        )
    for index, size in enumerate(sizes):
        if size <= 0:
            raise ConfigurationError(
                f"Layer {index} must have a positive number of units, got {size}"
            )
    return sizes


@dataclass(frozen=True)
class TrainingExample:
    """A single (input vector, expected-output vector) pair."""

    inputs: Array
    targets: Array


@dataclass(frozen=True)
class TrainingSet:
    """Ordered, immutable collection of training examples.

    The widths of every example are checked against ``input_width`` and
    ``output_width`` on construction, so the training loop never has to
    re-validate individual examples.
    """

    input_width: int
    output_width: int
    examples: Tuple[TrainingExample, ...]
    provenance: dict = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if not self.examples:
            raise ConfigurationError("Training set must contain at least one example")
        for index, example in enumerate(self.examples):
            if example.inputs.shape != (self.input_width,):
                raise DimensionMismatch(
                    f"training example {index} inputs",
                    self.input_width,
                    int(example.inputs.size),
                )
            if example.targets.shape != (self.output_width,):
                raise DimensionMismatch(
                    f"training example {index} targets",
                    self.output_width,
                    int(example.targets.size),
                )

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[Tuple[Iterable[float], Iterable[float]]],
        topology: Sequence[int],
        provenance: dict | None = None,
    ) -> "TrainingSet":
        sizes = validate_topology(topology)
        examples = tuple(
            TrainingExample(inputs=as_vector(x), targets=as_vector(y)) for x, y in pairs
        )
        return cls(
            input_width=sizes[0],
            output_width=sizes[-1],
            examples=examples,
            provenance=dict(provenance or {}),
        )

    def __iter__(self) -> Iterator[TrainingExample]:
        return iter(self.examples)

    def __len__(self) -> int:
        return len(self.examples)


@dataclass(frozen=True)
class Hyperparameters:
    """Convergence settings for one adaptive training run."""

    learning_rate: float = 1.0
    rate_modifier: float = 2.0
    rate_floor: float = 1e-6
    rate_ceiling: float | None = None
    error_threshold: float = 0.01
    max_iterations: int = 100_000
    random_range: Tuple[float, float] = (-1.0, 1.0)

    def __post_init__(self) -> None:
        if not self.learning_rate > 0:
            raise ConfigurationError(
                f"learning_rate must be positive, got {self.learning_rate}"
            )
        if not self.rate_modifier > 0:
            raise ConfigurationError(
                f"rate_modifier must be positive, got {self.rate_modifier}"
            )
        if self.rate_floor < 0:
            raise ConfigurationError(f"rate_floor must be >= 0, got {self.rate_floor}")
        if self.rate_ceiling is not None and self.rate_ceiling < self.rate_floor:
            raise ConfigurationError(
                f"rate_ceiling {self.rate_ceiling} is below rate_floor {self.rate_floor}"
            )
        if self.error_threshold < 0:
            raise ConfigurationError(
                f"error_threshold must be >= 0, got {self.error_threshold}"
            )
        if int(self.max_iterations) < 1:
            raise ConfigurationError(
                f"max_iterations must be at least 1, got {self.max_iterations}"
            )
        low, high = self.random_range
        if low > high:
            raise ConfigurationError(f"random_range min {low} exceeds max {high}")

    @property
    def adaptive(self) -> bool:
        """``False`` when the modifier is exactly one."""

        return self.rate_modifier != 1


@dataclass
class ForwardResult:
    """Per-layer buffers written by a forward pass."""

    activations: List[Array]
    weighted_sums: List[Array]

    @property
    def outputs(self) -> Array:
        return self.activations[-1]


class TerminationReason(str, enum.Enum):
    """Why a training run stopped (``RUNNING`` only while in progress)."""

    RUNNING = "running"
    CONVERGED = "converged"
    RATE_EXHAUSTED = "rate_exhausted"
    ITERATION_EXHAUSTED = "iteration_exhausted"


@dataclass(frozen=True)
class TrainResult:
    """Summary returned by :meth:`adaptnets.training.trainer.AdaptiveTrainer.run`."""

    reason: TerminationReason
    iterations: int
    learning_rate: float
    errors: Tuple[float, ...] = ()
    reverts: int = 0

    @property
    def converged(self) -> bool:
        return self.reason is TerminationReason.CONVERGED

    @property
    def max_error(self) -> float:
        return max(self.errors) if self.errors else 0.0


@dataclass(frozen=True)
class NetworkDescription:
    """Description of the feed-forward network architecture."""

    layer_sizes: List[int]
    activation: str
    parameter_count: int
