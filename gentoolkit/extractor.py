"""Struct field extraction from parsed Go files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import RenderError, TagSyntaxError
from .logging import get_logger
from .models import FieldInfo, File
from .tags import parse_tags, unquote

logger = get_logger("extractor")

_RECORD_SPECS = {"type_spec", "type_alias"}
_STRING_LITERALS = {"interpreted_string_literal", "raw_string_literal", "rune_literal"}
_NAMED_DECLARATIONS = {
    "parameter_declaration",
    "variadic_parameter_declaration",
    "field_declaration",
}
_OPENERS = {"(", "[", "{"}
_CLOSERS = {")", "]", "}"}


@dataclass
class Extraction:
    """Records found in one file, plus the ones abandoned on render failure."""

    records: Dict[str, List[FieldInfo]] = field(default_factory=dict)
    failures: Dict[str, RenderError] = field(default_factory=dict)


@dataclass(frozen=True)
class _Token:
    text: str
    node: Any


def walk(node: Any, visit: Callable[[Any], bool]) -> None:
    """Visit ``node`` and its descendants in source order.

    ``visit`` returns False to keep the walk out of the node's children.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        if visit(current):
            stack.extend(reversed(current.children))


def extract_records(source_file: File) -> Extraction:
    """Map every struct declared in ``source_file`` to its ordered fields."""
    extraction = Extraction()
    root = source_file.root
    if root is None:
        return extraction
    source = source_file.source

    def _visit(node: Any) -> bool:
        spec = _struct_spec(node, source)
        if spec is None:
            return True
        name, struct_node = spec
        if name in extraction.records:
            logger.debug("%s: struct %s declared again, keeping the later one", source_file.path, name)
        try:
            extraction.records[name] = extract_fields(struct_node, source)
            extraction.failures.pop(name, None)
        except RenderError as exc:
            logger.warning("%s: skipping struct %s: %s", source_file.path, name, exc)
            extraction.records.pop(name, None)
            extraction.failures[name] = exc
        # A struct body is never searched for further declarations.
        return False

    walk(root, _visit)
    return extraction


def extract_fields(struct_node: Any, source: bytes) -> List[FieldInfo]:
    """Return the fields of a ``struct_type`` node in declaration order."""
    if struct_node.has_error:
        raise RenderError(f"malformed struct body at byte {struct_node.start_byte}")
    fields: List[FieldInfo] = []
    for declaration in _field_declarations(struct_node):
        names = declaration.children_by_field_name("name")
        type_node = declaration.child_by_field_name("type")
        if type_node is None:
            raise RenderError(f"field without a type at byte {declaration.start_byte}")

        embedded = not names
        type_text = render_type(type_node, source)
        if embedded:
            if any(child.type == "*" for child in declaration.children):
                type_text = "*" + type_text
            name = _embedded_name(type_node, source)
        else:
            name = _text(names[0], source)
            if len(names) > 1:
                logger.debug(
                    "field group %s shares type %s; only %s is extracted",
                    ", ".join(_text(n, source) for n in names),
                    type_text,
                    name,
                )

        tags, tag_error = _field_tags(declaration.child_by_field_name("tag"), source)
        fields.append(
            FieldInfo(name=name, type=type_text, tags=tags, tag_error=tag_error, embedded=embedded)
        )
    return fields


def render_type(node: Any, source: bytes) -> str:
    """Render a type expression as canonical single-line Go source."""
    if node.has_error or node.is_missing:
        raise RenderError(
            f"malformed type expression {_text(node, source)!r} at byte {node.start_byte}"
        )
    tokens = _normalise(list(_tokens(node, source)), source)
    parts: List[str] = []
    for index, token in enumerate(tokens):
        if index and _needs_space(tokens, index):
            parts.append(" ")
        parts.append(token.text)
    return "".join(parts)


def _struct_spec(node: Any, source: bytes) -> Optional[Tuple[str, Any]]:
    if node.type not in _RECORD_SPECS:
        return None
    name_node = node.child_by_field_name("name")
    type_node = node.child_by_field_name("type")
    if name_node is None or type_node is None or type_node.type != "struct_type":
        return None
    return _text(name_node, source), type_node


def _field_declarations(struct_node: Any) -> Iterator[Any]:
    for child in struct_node.named_children:
        if child.type != "field_declaration_list":
            continue
        for declaration in child.named_children:
            if declaration.type == "field_declaration":
                yield declaration


def _embedded_name(type_node: Any, source: bytes) -> str:
    node = type_node
    while node.type in {"generic_type", "qualified_type", "pointer_type"}:
        inner = node.child_by_field_name("name")
        if inner is None:
            inner = node.child_by_field_name("type")
        if inner is None:
            inner = node.named_children[-1]
        node = inner
    return _text(node, source)


def _field_tags(tag_node: Any, source: bytes) -> Tuple[Optional[Any], Optional[str]]:
    if tag_node is None:
        return None, None
    raw = _text(tag_node, source).strip()
    try:
        if tag_node.type == "interpreted_string_literal":
            raw = unquote(raw)
        else:
            raw = raw.strip("`")
        tags = parse_tags(raw.strip())
    except TagSyntaxError as exc:
        return None, str(exc)
    return (tags if len(tags) else None), None


def _tokens(node: Any, source: bytes) -> Iterable[_Token]:
    if node.type == "comment":
        return
    if node.child_count == 0 or node.type in _STRING_LITERALS:
        yield _Token(_text(node, source), node)
        return
    for child in node.children:
        yield from _tokens(child, source)


def _normalise(tokens: List[_Token], source: bytes) -> List[_Token]:
    """Turn line breaks into semicolons and drop redundant separators."""
    result: List[_Token] = []
    for index, token in enumerate(tokens):
        text = token.text
        if not text.strip() or text == "\x00":
            text = ";"
        elif index and result:
            previous = tokens[index - 1]
            gap = source[previous.node.end_byte : token.node.start_byte]
            if b"\n" in gap and result[-1].text not in {"{", "(", "[", ",", ";"} and text not in _CLOSERS:
                result.append(_Token(";", token.node))
        if text in {";", ","} and (not result or result[-1].text in {"{", "(", "[", ";"}):
            continue
        if text in _CLOSERS and result and result[-1].text in {";", ","}:
            result.pop()
        result.append(_Token(text, token.node) if text != token.text else token)
    while result and result[-1].text == ";":
        result.pop()
    return result


def _needs_space(tokens: List[_Token], index: int) -> bool:
    prev, cur = tokens[index - 1], tokens[index]
    if cur.text == "}":
        return prev.text != "{"
    if cur.text in {")", "]", ",", ";", "."}:
        return False
    if _is_operator(prev.node) or _is_operator(cur.node):
        return True
    if prev.text == "chan" and cur.text == "(":
        return True
    if prev.text == "{":
        return True
    if cur.text == "{":
        return False
    if prev.text in {",", ";"} or "|" in {prev.text, cur.text}:
        return True
    if prev.text == "<-":
        return index >= 2 and tokens[index - 2].text == "chan"
    if prev.text in _OPENERS or prev.text in {".", "*", "~", "...", "]"}:
        return False
    if prev.text == ")":
        return True
    if cur.node.type in _STRING_LITERALS:
        return True
    if _is_word(prev.text) and _is_word(cur.text):
        return True
    # A parameter or field name is separated from the type that follows it.
    parent = prev.node.parent
    return (
        prev.node.type in {"identifier", "field_identifier"}
        and parent is not None
        and parent.type in _NAMED_DECLARATIONS
    )


def _is_operator(node: Any) -> bool:
    """Binary operators such as the ``*`` in ``[N*2]int``."""
    parent = node.parent
    return parent is not None and parent.type == "binary_expression" and not node.is_named


def _is_word(text: str) -> bool:
    return bool(text) and (text[0].isalnum() or text[0] == "_")


def _text(node: Any, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


__all__ = ["Extraction", "extract_fields", "extract_records", "render_type", "walk"]
