"""Training-set sources and registry helpers."""

# Ensure built-in sources register themselves when the package is imported.
from . import pels as _pels  # noqa: F401
from . import sources as _sources  # noqa: F401
from .pels import read_pels, write_pels
from .registry import available_sources, get, register_source

__all__ = [
    "available_sources",
    "get",
    "read_pels",
    "register_source",
    "write_pels",
]
