"""Pluggable code generation for the fields of Go struct types."""

from .config import SessionConfig
from .errors import (
    ConfigError,
    EmitError,
    FormatError,
    GentoolkitError,
    LoadError,
    RenderError,
    TagSyntaxError,
    TypeNotFoundError,
)
from .extractor import extract_records, render_type
from .generators import Generator
from .loader import load_package
from .models import FieldInfo, File, Package, RecordInfo
from .session import GenerationSession
from .sink import OutputSink
from .tags import Tag, Tags, parse_tags

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "EmitError",
    "FieldInfo",
    "File",
    "FormatError",
    "GenerationSession",
    "Generator",
    "GentoolkitError",
    "LoadError",
    "OutputSink",
    "Package",
    "RecordInfo",
    "RenderError",
    "SessionConfig",
    "Tag",
    "TagSyntaxError",
    "Tags",
    "TypeNotFoundError",
    "extract_records",
    "load_package",
    "parse_tags",
    "render_type",
]
