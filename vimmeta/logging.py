"""Logging setup for vimmeta.

Two streams share the ``vimmeta`` logger hierarchy: progress messages from
the parser and the plugin walker, and per-node classification diagnostics on
``vimmeta.classifier``. Diagnostics never change the extracted model, so they
get their own console prefix and can be silenced without hiding the rest of
the log. A log file, when given, receives both.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

_LOGGER_NAME = "vimmeta"
DIAGNOSTICS_LOGGER_NAME = f"{_LOGGER_NAME}.classifier"

_CONSOLE_FORMAT = "[vimmeta] %(levelname)s %(message)s"
_DIAGNOSTIC_FORMAT = "[vimmeta] diagnostic: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the vimmeta hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def get_diagnostics_logger() -> logging.Logger:
    """Return the logger that carries classification diagnostics."""
    return logging.getLogger(DIAGNOSTICS_LOGGER_NAME)


def _replace_handlers(logger: logging.Logger, handlers: Iterable[logging.Handler]) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)


def _stream_handler(fmt: str, level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    diagnostics: bool = True,
) -> logging.Logger:
    """Install console (and optional file) handlers for both vimmeta streams.

    ``diagnostics=False`` keeps classification diagnostics off the console;
    they still reach ``log_file``.
    """
    level = logging.DEBUG if verbose else logging.INFO

    file_handler: logging.Handler | None = None
    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    file_handlers = [file_handler] if file_handler is not None else []

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    _replace_handlers(logger, [_stream_handler(_CONSOLE_FORMAT, level), *file_handlers])

    # Diagnostics bypass the package handlers so they are printed exactly once.
    diagnostics_logger = get_diagnostics_logger()
    diagnostics_logger.setLevel(logging.WARNING)
    diagnostics_logger.propagate = False
    console = [_stream_handler(_DIAGNOSTIC_FORMAT, logging.WARNING)] if diagnostics else []
    _replace_handlers(diagnostics_logger, [*console, *file_handlers])

    return logger


__all__ = [
    "DIAGNOSTICS_LOGGER_NAME",
    "configure_logging",
    "get_diagnostics_logger",
    "get_logger",
]
