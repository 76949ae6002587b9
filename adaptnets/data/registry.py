"""Registry of training-set sources."""

from __future__ import annotations

from typing import Any, Callable, Iterable, MutableMapping, Sequence

from ..core.types import TrainingSet

SourceFactory = Callable[..., TrainingSet]


_REGISTRY: MutableMapping[str, SourceFactory] = {}


def register_source(
    name: str | None = None,
    factory: SourceFactory | None = None,
) -> Callable[[SourceFactory], SourceFactory] | SourceFactory:
    """Register a training-set factory.

    ``register_source`` can be used both as a decorator::

        @register_source("cases")
        def make_cases(topology, **options):
            ...

    or directly::

        register_source("cases", make_cases)

    Factories receive the network topology as their first argument and
    return a validated :class:`~adaptnets.core.types.TrainingSet`.
    """

    def _decorator(func: SourceFactory) -> SourceFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_source requires a name when used without a decorator")
    return _decorator


def get(name: str, topology: Sequence[int], **options: Any) -> TrainingSet:
    """Build the training set ``name`` for a network with ``topology``."""

    if name not in _REGISTRY:
        raise ValueError(
            f"Unknown training-set source: {name} (available: {', '.join(available_sources())})"
        )
    training_set = _REGISTRY[name](topology, **options)
    if not isinstance(training_set, TrainingSet):
        raise TypeError(f"Source {name!r} did not return a TrainingSet")
    return training_set


def available_sources() -> Iterable[str]:
    """Return the sorted list of registered source names."""

    return sorted(_REGISTRY)


__all__ = ["SourceFactory", "available_sources", "get", "register_source"]
