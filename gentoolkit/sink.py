"""Write-only output sink handed to generators."""

from __future__ import annotations

from typing import Any, Union


class OutputSink:
    """Appends generated text to the buffer of a single record.

    Generators see only :meth:`write` and :meth:`printf`; both land in the same
    buffer, in call order.
    """

    __slots__ = ("_record_name", "_buffer", "_encoding")

    def __init__(self, record_name: str, buffer: bytearray, *, encoding: str = "utf-8") -> None:
        self._record_name = record_name
        self._buffer = buffer
        self._encoding = encoding

    @property
    def record_name(self) -> str:
        return self._record_name

    def write(self, data: Union[bytes, bytearray, str]) -> int:
        if isinstance(data, str):
            data = data.encode(self._encoding)
        self._buffer.extend(data)
        return len(data)

    def printf(self, template: str, *args: Any) -> int:
        """Write ``template % args``; a template without args is written as-is."""
        return self.write(template % args if args else template)


__all__ = ["OutputSink"]
