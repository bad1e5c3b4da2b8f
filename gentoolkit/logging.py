"""Logging utilities for gentoolkit commands.

Every record is stamped with the running tool's name (``gentoolkit-getter``,
``gentoolkit-setter``...), which both the console and the log file print as
their prefix.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "gentoolkit"

CONSOLE_FORMAT = "[%(tool)s] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(tool)s %(levelname)s %(name)s: %(message)s"


class ToolPrefixFilter(logging.Filter):
    """Attach the tool name to every record passing through a handler."""

    def __init__(self, tool: str) -> None:
        super().__init__()
        self.tool = tool

    def filter(self, record: logging.LogRecord) -> bool:
        record.tool = self.tool
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the gentoolkit hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None, prefix: str = _LOGGER_NAME
) -> logging.Logger:
    """Send gentoolkit logs to stderr, and to ``log_file`` when given, tagged with ``prefix``."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    prefix_filter = ToolPrefixFilter(prefix)
    handlers = [(logging.StreamHandler(), CONSOLE_FORMAT)]
    if log_file is not None:
        handlers.append((logging.FileHandler(log_file, encoding="utf-8"), FILE_FORMAT))
    for handler, fmt in handlers:
        handler.setLevel(level)
        handler.addFilter(prefix_filter)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)

    return logger


__all__ = ["CONSOLE_FORMAT", "FILE_FORMAT", "ToolPrefixFilter", "configure_logging", "get_logger"]
