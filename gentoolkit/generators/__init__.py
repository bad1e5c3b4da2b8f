"""Generator plugin implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable

from .accessors import AccessorGenerator, GetterGenerator, SetterGenerator
from .base import Generator

_ENTRY_POINT_GROUP = "gentoolkit.generators"

_BUILTIN_FACTORIES: Dict[str, Callable[[], Generator]] = {
    "getter": GetterGenerator,
    "setter": SetterGenerator,
    "accessor": AccessorGenerator,
}


def available_generators() -> Dict[str, Callable[[], Generator]]:
    """Return generator factories keyed by name, built-ins first."""
    factories: Dict[str, Callable[[], Generator]] = dict(_BUILTIN_FACTORIES)
    for entry in _iter_entry_points():
        if entry.name in factories:
            continue

        def _factory(entry: metadata.EntryPoint = entry) -> Generator:
            try:
                loaded = entry.load()
            except Exception as exc:  # pragma: no cover - third-party import failure
                raise RuntimeError(f"Failed to load generator entry point '{entry.name}': {exc}") from exc
            return _coerce_generator(loaded)

        factories[entry.name] = _factory
    return factories


def get_generator(name: str) -> Generator:
    """Instantiate the generator registered under ``name``."""
    factories = available_generators()
    factory = factories.get(name)
    if factory is None:
        known = ", ".join(sorted(factories))
        raise ValueError(f"Unknown generator '{name}' (available: {known})")
    return _coerce_generator(factory())


def _coerce_generator(obj: object) -> Generator:
    if isinstance(obj, Generator):
        return obj
    if isinstance(obj, type) and issubclass(obj, Generator):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Generator):
            return instance
    raise TypeError("Generator entry point must be a Generator subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points(group=_ENTRY_POINT_GROUP)


__all__ = [
    "AccessorGenerator",
    "Generator",
    "GetterGenerator",
    "SetterGenerator",
    "available_generators",
    "get_generator",
]
