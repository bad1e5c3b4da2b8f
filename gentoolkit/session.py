"""Generation session: per-type dispatch and buffered write-out."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Set

from .config import SessionConfig
from .emit import Formatter, GofmtFormatter, output_path_for, write_output
from .errors import TypeNotFoundError
from .extractor import extract_records
from .logging import get_logger
from .models import Package, RecordInfo
from .sink import OutputSink

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .generators.base import Generator


class GenerationSession:
    """Runs one generator over a loaded package.

    Output for each struct accumulates in its own buffer. A struct that appears
    in several files receives the generator's output for every occurrence, in
    file load order. Only structs whose name was requested are dispatched.
    """

    def __init__(
        self,
        package: Package,
        generator: "Generator",
        config: SessionConfig,
        *,
        formatter: Optional[Formatter] = None,
    ) -> None:
        self.package = package
        self.generator = generator
        self.config = config
        self.formatter = formatter or GofmtFormatter()
        self.logger = get_logger("session")
        self._buffers: Dict[str, bytearray] = {}
        self._visited: Set[str] = set()

    def run(self, type_names: Iterable[str]) -> List[Path]:
        """Generate every requested type, then write one file per type."""
        requested = _unique(type_names)
        self.logger.debug("%s: generating %s", self.config.tool_name, ", ".join(requested))
        for type_name in requested:
            self.generate(type_name)
        return self.write_out(requested)

    def generate(self, type_name: str) -> int:
        """Dispatch every declaration of ``type_name`` to the generator.

        Returns the number of declarations dispatched during this call.
        """
        if type_name in self._visited:
            self.logger.debug("Type %s already generated in this session", type_name)
            return 0
        self._visited.add(type_name)

        dispatched = 0
        for source_file in self.package.files:
            source_file.type_name = type_name
            if source_file.tree is None:
                continue
            extraction = extract_records(source_file)
            self.logger.debug(
                "%s: %d structs found", source_file.path, len(extraction.records)
            )
            failure = extraction.failures.get(type_name)
            if failure is not None:
                self.logger.warning(
                    "%s: not generating for %s: %s", source_file.path, type_name, failure
                )
            fields = extraction.records.get(type_name)
            if fields is None:
                continue
            record = RecordInfo(
                package=self.package,
                file=source_file,
                name=type_name,
                fields=tuple(fields),
            )
            self.generator.generate(record, OutputSink(type_name, self._buffer_for(type_name)))
            dispatched += 1
        return dispatched

    def buffer(self, type_name: str) -> Optional[bytes]:
        """Return the accumulated output for ``type_name``, if it was ever dispatched."""
        buffer = self._buffers.get(type_name)
        return bytes(buffer) if buffer is not None else None

    def write_out(self, type_names: Iterable[str]) -> List[Path]:
        """Format and persist the buffers of the requested types.

        Every requested type is checked before any file is written.
        """
        requested = _unique(type_names)
        missing = [name for name in requested if name not in self._buffers]
        if missing:
            raise TypeNotFoundError(missing)

        written: List[Path] = []
        for type_name in requested:
            source = bytes(self._buffers[type_name])
            if self.config.format_output:
                source = self.formatter.format(source)
            path = output_path_for(
                type_name,
                self.config.file_suffix,
                self.package.directory,
                output=self.config.output,
                extension=self.config.extension,
            )
            written.append(write_output(path, source))
            del self._buffers[type_name]
            # A written type can be generated again by a later run.
            self._visited.discard(type_name)
        return written

    def _buffer_for(self, type_name: str) -> bytearray:
        buffer = self._buffers.get(type_name)
        if buffer is None:
            buffer = bytearray()
            self._buffers[type_name] = buffer
        return buffer


def _unique(names: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for name in names:
        cleaned = name.strip()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


__all__ = ["GenerationSession"]
