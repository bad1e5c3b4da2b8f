"""Output naming, formatting and persistence for generated files."""

from __future__ import annotations

import os
from pathlib import Path
import re
import subprocess
from typing import Callable, Optional, Protocol, Sequence

from .errors import EmitError, FormatError
from .logging import get_logger

logger = get_logger("emit")

_MATCH_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_MATCH_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")

Runner = Callable[[Sequence[str], bytes], "subprocess.CompletedProcess[bytes]"]


class Formatter(Protocol):
    """Rewrites generated source into its canonical layout."""

    def format(self, source: bytes) -> bytes:
        """Return formatted source or raise :class:`FormatError`."""


def to_snake_case(name: str) -> str:
    """Convert ``UserProfile`` to ``user_profile`` and ``HTTPClient`` to ``http_client``."""
    snake = _MATCH_FIRST_CAP.sub(r"\1_\2", name)
    snake = _MATCH_ALL_CAP.sub(r"\1_\2", snake)
    return snake.lower()


def output_path_for(
    type_name: str,
    suffix: str,
    directory: Path,
    *,
    output: Optional[Path] = None,
    extension: str = ".go",
) -> Path:
    """Return the file generated code for ``type_name`` is written to."""
    if output is not None:
        return Path(output)
    base_name = f"{to_snake_case(type_name)}_{suffix}{extension}"
    return Path(directory) / base_name.lower()


class GofmtFormatter:
    """Pipes generated code through the ``gofmt`` binary."""

    def __init__(self, binary: str = "gofmt", runner: Optional[Runner] = None) -> None:
        self.binary = binary
        self._runner = runner or self._run

    def format(self, source: bytes) -> bytes:
        try:
            completed = self._runner([self.binary], source)
        except FileNotFoundError as exc:
            raise FormatError(f"formatting output: {self.binary} not found") from exc
        if completed.returncode != 0:
            detail = completed.stderr.decode("utf-8", errors="replace").strip()
            raise FormatError(f"formatting output: {detail or 'gofmt failed'}")
        return completed.stdout

    @staticmethod
    def _run(args: Sequence[str], source: bytes) -> "subprocess.CompletedProcess[bytes]":
        return subprocess.run(
            list(args),
            input=source,
            check=False,
            capture_output=True,
        )


def write_output(path: Path, data: bytes, *, mode: int = 0o644) -> Path:
    """Write ``data`` to ``path``, replacing whatever was there."""
    try:
        path.write_bytes(data)
        os.chmod(path, mode)
    except OSError as exc:
        raise EmitError(f"writing output: {exc}") from exc
    logger.info("Wrote %s (%d bytes)", path, len(data))
    return path


__all__ = [
    "Formatter",
    "GofmtFormatter",
    "output_path_for",
    "to_snake_case",
    "write_output",
]
