"""Base class for generator plugins."""

from abc import ABC, abstractmethod

from ..models import RecordInfo
from ..sink import OutputSink


class Generator(ABC):
    """Contract for generators that emit code for one struct at a time."""

    name: str = ""
    file_suffix: str = "gen"

    @abstractmethod
    def generate(self, record: RecordInfo, sink: OutputSink) -> None:
        """Write generated code for ``record``; must not keep the sink or record."""
