"""Exception types raised across gentoolkit components."""

from __future__ import annotations

from typing import Iterable, List


class GentoolkitError(RuntimeError):
    """Base class for failures that abort a generation run."""


class ConfigError(GentoolkitError):
    """Raised when the configuration file cannot be parsed."""


class LoadError(GentoolkitError):
    """Raised when the source package cannot be loaded as a single unit."""


class RenderError(GentoolkitError):
    """Raised when a type expression cannot be rendered back to source text."""


class TagSyntaxError(ValueError):
    """Raised when a struct tag does not follow the key:"value" convention."""


class TypeNotFoundError(GentoolkitError):
    """Raised when requested types were never encountered in the package."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing: List[str] = list(missing)
        names = ", ".join(self.missing)
        super().__init__(f"type not found in package: {names}")


class FormatError(GentoolkitError):
    """Raised when the formatting pass rejects generated output."""


class EmitError(GentoolkitError):
    """Raised when generated output cannot be written to disk."""


__all__ = [
    "ConfigError",
    "EmitError",
    "FormatError",
    "GentoolkitError",
    "LoadError",
    "RenderError",
    "TagSyntaxError",
    "TypeNotFoundError",
]
