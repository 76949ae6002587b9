"""In-memory training-set sources: inline cases and boolean truth tables."""

from __future__ import annotations

import itertools
from typing import Callable, Dict, Sequence

from ..core.errors import ConfigurationError
from ..core.types import TrainingSet
from .registry import register_source

_BOOLEAN_FUNCTIONS: Dict[str, Callable[[Sequence[int]], int]] = {
    "and": lambda bits: int(all(bits)),
    "or": lambda bits: int(any(bits)),
    "xor": lambda bits: sum(bits) % 2,
    "nand": lambda bits: 1 - int(all(bits)),
    "nor": lambda bits: 1 - int(any(bits)),
    "xnor": lambda bits: 1 - sum(bits) % 2,
}


@register_source("cases")
def make_cases(topology: Sequence[int], cases: Sequence = (), **_: object) -> TrainingSet:
    """Build a training set from inline ``[[inputs], [targets]]`` pairs."""

    pairs = []
    for index, case in enumerate(cases):
        if len(case) != 2:
            raise ConfigurationError(
                f"Case {index} must be an [inputs, targets] pair, got {case!r}"
            )
        pairs.append((case[0], case[1]))
    return TrainingSet.from_pairs(
        pairs, topology, provenance={"type": "cases", "count": len(pairs)}
    )


@register_source("truth_table")
def make_truth_table(
    topology: Sequence[int],
    function: str = "xor",
    arity: int | None = None,
    outputs: int | None = None,
    **_: object,
) -> TrainingSet:
    """Enumerate every input combination of a boolean ``function``.

    The target is repeated on each output unit, so ``[2, 2, 3]`` networks
    learn the same function three times.
    """

    try:
        fn = _BOOLEAN_FUNCTIONS[function.lower()]
    except KeyError:
        choices = ", ".join(sorted(_BOOLEAN_FUNCTIONS))
        raise ConfigurationError(
            f"Unknown boolean function '{function}' (expected one of: {choices})"
        ) from None
    arity = int(arity if arity is not None else topology[0])
    width = int(outputs if outputs is not None else topology[-1])
    pairs = [
        (bits, [fn(bits)] * width) for bits in itertools.product((0, 1), repeat=arity)
    ]
    return TrainingSet.from_pairs(
        pairs,
        topology,
        provenance={"type": "truth_table", "function": function.lower(), "arity": arity},
    )


__all__ = ["make_cases", "make_truth_table"]
