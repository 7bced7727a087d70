"""Logging utilities for restgen commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "restgen"
_CONSOLE_FORMAT = "[restgen] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ContinuationFormatter(logging.Formatter):
    """Indent continuation lines by the width of the first line's prefix.

    Multi-line messages such as the ``pom.xml`` remediation snippet stay
    aligned under the ``[restgen] LEVEL`` prefix. Blank lines stay empty.
    """

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        head, sep, rest = text.partition("\n")
        if not sep:
            return text
        first_line = record.getMessage().split("\n", 1)[0]
        pad = " " * max(len(head) - len(first_line), 0)
        lines = [pad + line if line.strip() else "" for line in rest.split("\n")]
        return "\n".join([head, *lines])


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the restgen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the restgen logger with console output and an optional file sink.

    Verbose mode also surfaces the external tool command line and skipped
    source files, both logged at DEBUG.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(ContinuationFormatter(_CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        # The file sink records DEBUG regardless of --verbose.
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(ContinuationFormatter(_FILE_FORMAT))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    return logger


__all__ = ["ContinuationFormatter", "configure_logging", "get_logger"]
