"""Training loop and pipeline assembly."""

from .pipelines import RunResult, load_preset, presets, run_pipeline
from .trainer import AdaptiveTrainer

__all__ = ["AdaptiveTrainer", "RunResult", "load_preset", "presets", "run_pipeline"]
