"""
Logging setup for the CLI.

The library only emits records through `logging.getLogger(__name__)`; handlers
are installed here, for the lifetime of one CLI invocation.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

_LOGGER_NAME = "pbquery"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True, slots=True)
class LoggingState:
    level: int
    handlers: tuple[logging.Handler, ...]
    propagate: bool


def _level_for_verbosity(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(
    *,
    verbosity: int,
    log_file: Path | None,
    enable_file: bool,
) -> LoggingState:
    """Install stderr (and optional file) handlers; return the state to restore."""
    logger = logging.getLogger(_LOGGER_NAME)
    previous = LoggingState(
        level=logger.level,
        handlers=tuple(logger.handlers),
        propagate=logger.propagate,
    )

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    level = _level_for_verbosity(verbosity)
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(stderr_handler)

    if enable_file and log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(level)

    logger.propagate = False
    return previous


def restore_logging(previous: LoggingState) -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in previous.handlers:
        logger.addHandler(handler)
    logger.setLevel(previous.level)
    logger.propagate = previous.propagate
