"""Tree-sitter powered Go package loader."""

from __future__ import annotations

from pathlib import Path
import stat
from typing import Dict, List, Optional, Sequence

import tree_sitter_go
from tree_sitter import Language, Parser

from .errors import LoadError
from .logging import get_logger
from .models import Definition, File, Package

logger = get_logger("loader")

GO_LANGUAGE = Language(tree_sitter_go.language())

_DECLARATION_KINDS = {
    "type_spec": "type",
    "type_alias": "type",
    "function_declaration": "func",
    "var_spec": "var",
    "const_spec": "const",
}


def new_parser() -> Parser:
    """Return a parser bound to the Go grammar."""
    return Parser(GO_LANGUAGE)


def source_directory(patterns: Sequence[str]) -> Path:
    """Directory generated files are placed in for the given CLI patterns."""
    if not patterns:
        return Path(".")
    first = Path(patterns[0])
    if len(patterns) == 1 and is_directory(first):
        return first
    return first.parent


def is_directory(path: Path) -> bool:
    """Report whether ``path`` is a directory, failing if it does not exist."""
    try:
        return stat.S_ISDIR(path.stat().st_mode)
    except OSError as exc:
        raise LoadError(f"cannot stat {path}: {exc}") from exc


def resolve_files(patterns: Sequence[str]) -> List[Path]:
    """Expand one directory, or a list of files, into the Go files to parse."""
    if not patterns:
        patterns = ["."]
    if len(patterns) == 1 and is_directory(Path(patterns[0])):
        directory = Path(patterns[0])
        files = sorted(
            path
            for path in directory.glob("*.go")
            if path.is_file() and not path.name.endswith("_test.go")
        )
        if not files:
            raise LoadError(f"no Go files found in {directory}")
        return files

    files = []
    for pattern in patterns:
        path = Path(pattern)
        if not path.is_file():
            raise LoadError(f"{pattern}: no such file")
        if path.suffix != ".go":
            raise LoadError(f"{pattern}: not a Go source file")
        files.append(path)
    return files


def load_package(
    patterns: Sequence[str], *, parser: Optional[Parser] = None, strict: bool = True
) -> Package:
    """Parse the single package constructed from the patterns.

    With ``strict`` set, a file containing syntax errors aborts the load; without
    it the file is kept and the extractor skips the structs it cannot render.
    """
    parser = parser or new_parser()
    paths = resolve_files(list(patterns))
    directory = source_directory(list(patterns) or ["."])

    files: List[File] = []
    package_names: Dict[str, List[Path]] = {}
    for path in paths:
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise LoadError(f"cannot read {path}: {exc}") from exc
        tree = parser.parse(source)
        root = tree.root_node
        if root.has_error:
            location = _first_error_location(root)
            if strict:
                raise LoadError(f"{path}:{location}: syntax error")
            logger.warning("%s:%s: syntax error, continuing", path, location)

        name = _package_name(root, source)
        if name is None:
            raise LoadError(f"{path}: missing package clause")
        package_names.setdefault(name, []).append(path)
        files.append(File(path=path, source=source, tree=tree))

    if len(package_names) != 1:
        found = ", ".join(sorted(package_names))
        raise LoadError(f"error: {len(package_names)} packages found ({found})")

    defs: Dict[str, Definition] = {}
    for source_file in files:
        for definition in _definitions(source_file):
            defs.setdefault(definition.name, definition)

    package_name = next(iter(package_names))
    logger.debug("Loaded package %s with %d files", package_name, len(files))
    return Package(name=package_name, directory=directory, files=tuple(files), defs=defs)


def _package_name(root, source: bytes) -> Optional[str]:  # type: ignore[no-untyped-def]
    for child in root.named_children:
        if child.type != "package_clause":
            continue
        for part in child.named_children:
            if part.type == "package_identifier":
                return source[part.start_byte : part.end_byte].decode("utf-8")
    return None


def _definitions(source_file: File) -> List[Definition]:
    definitions: List[Definition] = []
    source = source_file.source
    for declaration in source_file.root.named_children:
        specs = [declaration]
        if declaration.type in {"type_declaration", "var_declaration", "const_declaration"}:
            specs = [
                spec
                for child in declaration.named_children
                for spec in ([child] if child.type != "var_spec_list" else child.named_children)
            ]
        for spec in specs:
            kind = _DECLARATION_KINDS.get(spec.type)
            if kind is None:
                continue
            for name_node in spec.children_by_field_name("name"):
                name = source[name_node.start_byte : name_node.end_byte].decode("utf-8")
                if name != "_":
                    definitions.append(Definition(name=name, kind=kind, path=source_file.path))
    return definitions


def _first_error_location(root) -> str:  # type: ignore[no-untyped-def]
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            row, column = node.start_point
            return f"{row + 1}:{column + 1}"
        stack.extend(reversed(node.children))
    return "?"


__all__ = [
    "GO_LANGUAGE",
    "is_directory",
    "load_package",
    "new_parser",
    "resolve_files",
    "source_directory",
]
