"""Struct tag parsing.

A struct tag is a sequence of space separated ``key:"value"`` pairs, where the
value is a Go double-quoted string holding a name and optional comma
separated options::

    json:"id,omitempty" db:"user_id"

Lookup by key is case sensitive. When a key repeats, :meth:`Tags.get` returns
the first occurrence; every occurrence is kept in :attr:`Tags.tags`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Iterator, List, Optional, Tuple

from .errors import TagSyntaxError

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
}
_ESCAPE_PATTERN = re.compile(
    r"""\\(?:
        (?P<simple>[abfnrtv\\"])
      | x(?P<hex>[0-9a-fA-F]{2})
      | u(?P<u4>[0-9a-fA-F]{4})
      | U(?P<u8>[0-9a-fA-F]{8})
      | (?P<oct>[0-7]{3})
      | (?P<bad>.?)
    )""",
    re.VERBOSE | re.DOTALL,
)


@dataclass(frozen=True)
class Tag:
    """One ``key:"name,opt,..."`` entry of a struct tag."""

    key: str
    name: str
    options: Tuple[str, ...] = ()

    @property
    def value(self) -> str:
        return ",".join((self.name, *self.options))

    def has_option(self, option: str) -> bool:
        return option in self.options

    def __str__(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'{self.key}:"{escaped}"'


@dataclass(frozen=True)
class Tags:
    """Ordered table of the tags attached to one field."""

    tags: Tuple[Tag, ...] = field(default_factory=tuple)

    def get(self, key: str) -> Optional[Tag]:
        for tag in self.tags:
            if tag.key == key:
                return tag
        return None

    def keys(self) -> List[str]:
        seen: List[str] = []
        for tag in self.tags:
            if tag.key not in seen:
                seen.append(tag.key)
        return seen

    def __contains__(self, key: object) -> bool:
        return any(tag.key == key for tag in self.tags)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self.tags)

    def __len__(self) -> int:
        return len(self.tags)

    def __str__(self) -> str:
        return " ".join(str(tag) for tag in self.tags)


def parse_tags(text: str) -> Tags:
    """Parse a struct tag body (without its surrounding backquotes)."""
    parsed: List[Tag] = []
    remaining = text
    while remaining:
        remaining = remaining.lstrip(" ")
        if not remaining:
            break

        # Scan to colon. A space, a quote or a control character is a syntax error.
        index = 0
        while index < len(remaining) and _is_key_char(remaining[index]):
            index += 1
        if index == 0:
            raise TagSyntaxError("bad syntax for struct tag key")
        if index + 1 >= len(remaining) or remaining[index] != ":":
            raise TagSyntaxError("bad syntax for struct tag pair")
        if remaining[index + 1] != '"':
            raise TagSyntaxError("bad syntax for struct tag value")
        key = remaining[:index]
        remaining = remaining[index + 1 :]

        # Scan the quoted value, honouring backslash escapes.
        index = 1
        while index < len(remaining) and remaining[index] != '"':
            if remaining[index] == "\\":
                index += 1
            index += 1
        if index >= len(remaining):
            raise TagSyntaxError("bad syntax for struct tag value")
        quoted = remaining[: index + 1]
        remaining = remaining[index + 1 :]

        value = unquote(quoted)
        name, *options = value.split(",")
        parsed.append(Tag(key=key, name=name, options=tuple(options)))
    return Tags(tuple(parsed))


def unquote(literal: str) -> str:
    """Decode a Go interpreted string literal, including its double quotes.

    ``\\x`` and octal escapes denote single bytes, as in Go. The decoded bytes
    are read as UTF-8; bytes that do not form valid UTF-8 come back as
    ``surrogateescape`` code points, so ``value.encode("utf-8", "surrogateescape")``
    restores them exactly.
    """
    if len(literal) < 2 or literal[0] != '"' or literal[-1] != '"':
        raise TagSyntaxError(f"not a quoted string: {literal!r}")
    body = literal[1:-1]
    if "\n" in body:
        raise TagSyntaxError("newline in quoted string")
    if '"' in _ESCAPE_PATTERN.sub("", body):
        raise TagSyntaxError(f"unescaped quote in {literal!r}")

    decoded = bytearray()
    position = 0
    for match in _ESCAPE_PATTERN.finditer(body):
        decoded += body[position : match.start()].encode("utf-8")
        decoded += _escape_bytes(match, literal)
        position = match.end()
    decoded += body[position:].encode("utf-8")
    return decoded.decode("utf-8", errors="surrogateescape")


def _escape_bytes(match: re.Match[str], literal: str) -> bytes:
    if match.group("simple"):
        return _SIMPLE_ESCAPES[match.group("simple")].encode("utf-8")
    if match.group("hex"):
        return bytes([int(match.group("hex"), 16)])
    if match.group("oct"):
        value = int(match.group("oct"), 8)
        if value > 0xFF:
            raise TagSyntaxError(f"octal escape out of range in {literal!r}")
        return bytes([value])
    for group in ("u4", "u8"):
        if match.group(group):
            code_point = int(match.group(group), 16)
            if code_point > 0x10FFFF or 0xD800 <= code_point <= 0xDFFF:
                raise TagSyntaxError(f"invalid unicode escape in {literal!r}")
            return chr(code_point).encode("utf-8")
    raise TagSyntaxError(f"invalid escape in {literal!r}")


def _is_key_char(char: str) -> bool:
    return char > " " and char not in {":", '"', "\x7f"}


__all__ = ["Tag", "Tags", "parse_tags", "unquote"]
