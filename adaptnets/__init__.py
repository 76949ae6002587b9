"""AdaptNets public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.errors import AdaptNetsError, ConfigurationError, DimensionMismatch
from .core.network import Network
from .core.propagation import apply_deltas, backward, forward, revert_deltas
from .core.types import Hyperparameters, TerminationReason, TrainingSet, TrainResult
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import AdaptiveTrainer

__all__ = [
    "AdaptNetsError",
    "AdaptiveTrainer",
    "ConfigurationError",
    "DimensionMismatch",
    "Hyperparameters",
    "Network",
    "TerminationReason",
    "TrainResult",
    "TrainingSet",
    "activations",
    "apply_deltas",
    "backward",
    "forward",
    "load_preset",
    "presets",
    "revert_deltas",
    "run_pipeline",
    "types",
]
