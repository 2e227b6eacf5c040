"""
Logging configuration — set up once by the CLI entrypoint.

Progress lines ("Downloading ...", "Extracting files for ...") are the
updater's main output, so the console logs at INFO unless told
otherwise.

Level precedence:
    --debug / --verbose / --quiet  >  JBU_LOG_LEVEL  >  INFO

JBU_LOG_FILE adds a file handler; JBU_LOG_FILE_LEVEL sets its level
(default: same as the console).
"""

from __future__ import annotations

import logging
import sys

DEFAULT_LEVEL = logging.INFO

# Plain "date time message" lines at INFO and above
_FMT_PROGRESS = "%(asctime)s %(message)s"
_DATEFMT_PROGRESS = "%Y/%m/%d %H:%M:%S"

# ERROR and above (--quiet): message only
_FMT_QUIET = "%(message)s"

# DEBUG: where each line came from
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for the whole process.

    Replaces any handlers already installed, so calling it twice (as
    the tests do) does not duplicate output.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a log file to append to.
        log_file_level: Level for the log file. Defaults to ``level``.
    """
    console_level = _parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root.addHandler(_file_handler(log_file, file_level))
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def _console_formatter(level: int) -> logging.Formatter:
    if level <= logging.DEBUG:
        return logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_DEBUG)
    if level < logging.ERROR:
        return logging.Formatter(_FMT_PROGRESS, datefmt=_DATEFMT_PROGRESS)
    return logging.Formatter(_FMT_QUIET)


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
    return handler


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean INFO."""
    if not level:
        return DEFAULT_LEVEL
    numeric = logging.getLevelName(level.strip().upper())
    return numeric if isinstance(numeric, int) else DEFAULT_LEVEL
