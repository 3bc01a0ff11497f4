"""
Logging configuration — set up once by the CLI entrypoint.

Every module does ``logger = logging.getLogger(__name__)`` and so
hangs off the ``upm`` logger configured here. Records always go to
stderr: stdout carries backend output and ``--json`` documents.

Level precedence:
    --debug > --verbose > --quiet > UPM_LOG_LEVEL env var > WARNING

An additional log file can be requested with UPM_LOG_FILE, at its own
level via UPM_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "UPM_LOG_LEVEL"
LOG_FILE_ENV = "UPM_LOG_FILE"
LOG_FILE_LEVEL_ENV = "UPM_LOG_FILE_LEVEL"

_PACKAGE_LOGGER = "upm"

# (upper bound level, format, datefmt), first match wins
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s [%(threadName)s] %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "upm: %(message)s", None),
)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s [%(threadName)s] %(name)s:%(lineno)d — %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> str:
    """Pick the console level from CLI flags, falling back to the env."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LOG_LEVEL_ENV, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> logging.Logger:
    """Configure the ``upm`` logger for the whole process.

    Calling it again replaces the previous handlers, so tests and
    repeated CLI invocations in one process do not stack output.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a log file (defaults to UPM_LOG_FILE).
        log_file_level: Level for the file; defaults to UPM_LOG_FILE_LEVEL,
            then to ``level``.

    Returns:
        The configured package logger.
    """
    console_level = _parse_level(level)
    log_file = log_file or os.environ.get(LOG_FILE_ENV) or None
    log_file_level = log_file_level or os.environ.get(LOG_FILE_LEVEL_ENV) or None

    logger = logging.getLogger(_PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    fmt, datefmt = next((f, d) for bound, f, d in _CONSOLE_FORMATS if console_level <= bound)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    logger.addHandler(console)

    effective = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        logger.addHandler(fh)
        effective = min(effective, file_level)

    logger.setLevel(effective)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False
    return logger


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
