"""Logging for the crawler and its worker threads.

Every module logs under the ``tdcrawl`` hierarchy. The console sink stays
terse for interactive runs; the optional file sink records the worker
thread name so repository and file tasks can be told apart in a long crawl.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "tdcrawl"
_CONSOLE_FORMAT = "[tdcrawl] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``tdcrawl.<name>``, e.g. ``get_logger("walker")``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route crawler logs to the console and, when given, to ``log_file``.

    ``verbose`` lowers the level to DEBUG, which adds per-directory walk
    counts and skipped raw fetches.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # main() may run more than once per process.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = ["configure_logging", "get_logger"]
