"""Pel files: images flattened to whitespace-separated activation values.

A pel file holds one image as rows of numbers, one row per pixel row, as
produced by the bitmap conversion tooling. Reading flattens the rows in
order, which gives the input (or expected output) vector for a network.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import numpy as np

from ..core.errors import DimensionMismatch
from ..core.types import Array, TrainingSet
from .registry import register_source


def read_pels(path: str | Path, count: int | None = None, *, scale: float = 1.0) -> Array:
    """Return the first ``count`` values of the pel file at ``path``.

    Values are divided by ``scale``. Files with fewer than ``count`` values
    raise :class:`DimensionMismatch`.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Pel file not found: {path}")
    text = path.read_text()
    values = np.array(text.split(), dtype=np.float64)
    if count is not None:
        if values.size < count:
            raise DimensionMismatch(f"values in pel file {path.name}", count, int(values.size))
        values = values[:count]
    return values / float(scale)


def write_pels(
    path: str | Path, values: Sequence[float] | Array, *, row_width: int | None = None
) -> Path:
    """Write ``values`` as a pel file, ``row_width`` values per line."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    flat = np.asarray(values, dtype=np.float64).reshape(-1)
    width = int(row_width or flat.size or 1)
    lines = [
        " ".join(repr(float(v)) for v in flat[start : start + width])
        for start in range(0, flat.size, width)
    ]
    path.write_text("\n".join(lines) + "\n")
    return path


@register_source("pels")
def make_pel_cases(
    topology: Sequence[int],
    cases: Sequence[Sequence[str]] = (),
    root: str | Path | None = None,
    scale: float = 1.0,
    target_scale: float = 1.0,
    **_: object,
) -> TrainingSet:
    """Build a training set from ``[input_file, output_file]`` pairs."""

    base = Path(root) if root is not None else Path(".")
    pairs = []
    for input_file, output_file in cases:
        inputs = read_pels(base / input_file, topology[0], scale=scale)
        targets = read_pels(base / output_file, topology[-1], scale=target_scale)
        pairs.append((inputs, targets))
    return TrainingSet.from_pairs(
        pairs,
        topology,
        provenance={
            "type": "pels",
            "files": [[str(a), str(b)] for a, b in cases],
            "scale": scale,
        },
    )


__all__ = ["make_pel_cases", "read_pels", "write_pels"]
