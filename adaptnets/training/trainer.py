"""Adaptive step-size training loop for AdaptNets."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

import numpy as np

from ..core.errors import DimensionMismatch
from ..core.network import Network
from ..core.propagation import apply_deltas, backward, example_error, forward, revert_deltas
from ..core.types import Array, Hyperparameters, TerminationReason, TrainingSet, TrainResult

logger = logging.getLogger(__name__)


class AdaptiveTrainer:
    """Online back-propagation with an adaptive, rollback-capable learning rate.

    Examples are processed one at a time in training-set order. When the
    rate modifier is not exactly one, an update that fails to lower the
    example's error is reverted and the rate divided by the modifier;
    otherwise the update is kept and the rate multiplied. One iteration is
    one full sweep over the training set.

    Callbacks may implement ``on_progress(iteration, metrics)`` (called every
    ``progress_period`` sweeps), ``on_snapshot(iteration, weights)`` (every
    ``snapshot_period`` sweeps) and ``on_end(result)``.
    """

    def __init__(
        self,
        network: Network,
        hyperparameters: Hyperparameters,
        callbacks: Sequence[object] | None = None,
        *,
        progress_period: int = 0,
        snapshot_period: int = 0,
    ) -> None:
        self.network = network
        self.hyperparameters = hyperparameters
        self.callbacks = list(callbacks or [])
        self.progress_period = int(progress_period)
        self.snapshot_period = int(snapshot_period)
        self.learning_rate = float(hyperparameters.learning_rate)
        self.iterations = 0
        self.reverts = 0
        self.state = TerminationReason.RUNNING
        self._last_loss: float | None = None

    def run(self, training_set: TrainingSet) -> TrainResult:
        self._check_widths(training_set)
        hp = self.hyperparameters
        self.learning_rate = float(hp.learning_rate)
        self.iterations = 0
        self.reverts = 0
        self._last_loss = None
        self.state = TerminationReason.RUNNING
        errors = np.zeros(len(training_set))

        logger.info(
            "Training %s on %d examples (rate=%g, modifier=%g, threshold=%g, cap=%d)",
            list(self.network.topology),
            len(training_set),
            self.learning_rate,
            hp.rate_modifier,
            hp.error_threshold,
            hp.max_iterations,
        )

        while self.state is TerminationReason.RUNNING:
            for index, example in enumerate(training_set):
                errors[index] = self._step(example.inputs, example.targets)
            self.iterations += 1

            within = bool(np.all(errors <= hp.error_threshold))
            if within:
                # later examples in the sweep may have undone earlier ones
                errors[:] = self.evaluate(training_set)
                within = bool(np.all(errors <= hp.error_threshold))
            if self.progress_period > 0 and self.iterations % self.progress_period == 0:
                self._emit_progress(errors)
            if self.snapshot_period > 0 and self.iterations % self.snapshot_period == 0:
                self._emit_snapshot()

            if within:
                self.state = TerminationReason.CONVERGED
            elif self.learning_rate <= hp.rate_floor:
                self.state = TerminationReason.RATE_EXHAUSTED
            elif self.iterations >= hp.max_iterations:
                self.state = TerminationReason.ITERATION_EXHAUSTED

        result = TrainResult(
            reason=self.state,
            iterations=self.iterations,
            learning_rate=self.learning_rate,
            errors=tuple(self.evaluate(training_set)),
            reverts=self.reverts,
        )
        logger.info(
            "Training ended (%s) after %d iterations, learning rate %g, max error %g",
            result.reason.value,
            result.iterations,
            result.learning_rate,
            result.max_error,
        )
        for callback in self.callbacks:
            if hasattr(callback, "on_end"):
                callback.on_end(result)  # type: ignore[attr-defined]
        return result

    def evaluate(self, training_set: TrainingSet) -> list[float]:
        """Return each example's error under the current weights."""

        self._check_widths(training_set)
        return [
            example_error(forward(self.network, ex.inputs, check=False).outputs, ex.targets)
            for ex in training_set
        ]

    # ------------------------------------------------------------------
    # Internal helpers

    def _step(self, inputs: Array, targets: Array) -> float:
        """Train on one example and return its post-update error.

        The returned error is measured before any rollback, so a reverted
        update still counts against convergence for this sweep.
        """

        net = self.network
        hp = self.hyperparameters
        result = forward(net, inputs, check=False)
        prev_error = example_error(result.outputs, targets)
        deltas = backward(net, result, targets, self.learning_rate, check=False)
        apply_deltas(net, deltas)
        new_error = example_error(forward(net, inputs, check=False).outputs, targets)

        if not hp.adaptive:
            return new_error
        if new_error >= prev_error:
            revert_deltas(net, deltas)
            self.learning_rate /= hp.rate_modifier
            self.reverts += 1
        else:
            self.learning_rate *= hp.rate_modifier
            if hp.rate_ceiling is not None and self.learning_rate > hp.rate_ceiling:
                self.learning_rate = float(hp.rate_ceiling)
        return new_error

    def _check_widths(self, training_set: TrainingSet) -> None:
        if training_set.input_width != self.network.input_width:
            raise DimensionMismatch(
                "training set input width", self.network.input_width, training_set.input_width
            )
        if training_set.output_width != self.network.output_width:
            raise DimensionMismatch(
                "training set output width", self.network.output_width, training_set.output_width
            )

    def _emit_progress(self, errors: Array) -> None:
        loss = float(np.sum(errors))
        trend = 0.0 if self._last_loss is None else float(np.sign(loss - self._last_loss))
        self._last_loss = loss
        metrics: Mapping[str, float] = {
            "loss": loss,
            "max_error": float(np.max(errors)),
            "learning_rate": self.learning_rate,
            "reverts": float(self.reverts),
            "error_trend": trend,
        }
        logger.info(
            "Iteration %d: loss=%.6g max_error=%.6g rate=%.6g trend=%+d",
            self.iterations,
            metrics["loss"],
            metrics["max_error"],
            self.learning_rate,
            int(trend),
        )
        for callback in self.callbacks:
            if hasattr(callback, "on_progress"):
                callback.on_progress(self.iterations, metrics)  # type: ignore[attr-defined]

    def _emit_snapshot(self) -> None:
        weights = self.network.export_weights()
        for callback in self.callbacks:
            if hasattr(callback, "on_snapshot"):
                callback.on_snapshot(self.iterations, weights)  # type: ignore[attr-defined]


__all__ = ["AdaptiveTrainer"]
