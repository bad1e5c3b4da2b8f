"""Core data models shared across gentoolkit components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .tags import Tags


@dataclass(frozen=True)
class Definition:
    """A package-level identifier and the kind of declaration that introduced it."""

    name: str
    kind: str
    path: Path


@dataclass(eq=False)
class File:
    """A single parsed source file and associated data."""

    path: Path
    source: bytes
    tree: Any
    package: Optional["Package"] = None
    # Reset for each type being generated.
    type_name: str = ""

    @property
    def root(self) -> Any:
        return self.tree.root_node if self.tree is not None else None


@dataclass(frozen=True, eq=False)
class Package:
    """The loaded compilation unit: every parsed file of one Go package."""

    name: str
    directory: Path
    files: Tuple[File, ...]
    defs: Mapping[str, Definition] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", tuple(self.files))
        object.__setattr__(self, "defs", MappingProxyType(dict(self.defs)))
        for source_file in self.files:
            source_file.package = self


@dataclass(frozen=True)
class FieldInfo:
    """One struct field as declared in source."""

    name: str
    type: str
    tags: Optional["Tags"] = None
    tag_error: Optional[str] = None
    embedded: bool = False


@dataclass(frozen=True)
class RecordInfo:
    """The struct a generator is invoked for."""

    package: Package
    file: File
    name: str
    fields: Tuple[FieldInfo, ...]

    @property
    def receiver(self) -> str:
        """Conventional receiver name: the lower-cased first letter of the type."""
        return self.name[:1].lower()


__all__ = ["Definition", "FieldInfo", "File", "Package", "RecordInfo"]
