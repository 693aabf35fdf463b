"""
Logging configuration — one setup call for the CLI entrypoint.

Every module logs through ``logging.getLogger(__name__)``; main.py calls
``setup_logging`` once with its flags, before any native tool runs.

Levels are resolved in precedence order:
    --debug / --verbose / --quiet  >  DISTROPKG_LOG_LEVEL  >  WARNING

A second, usually more detailed, copy can go to a file through
DISTROPKG_LOG_FILE / DISTROPKG_LOG_FILE_LEVEL, which is how deployment
runs keep the full apt/yum/zypper transcript without flooding the
console.
"""

from __future__ import annotations

import logging
import sys
from typing import Mapping

# ── Format strings ──────────────────────────────────────────────

# WARNING and above: the message is all an operator needs
_FMT_CONSOLE = "%(message)s"

# INFO: mostly "CMD ..." lines, so a timestamp is enough context
_FMT_INFO = "%(asctime)s %(message)s"

# DEBUG: native tool output is interleaved, show where each line comes from
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s"

_DATEFMT_CONSOLE = "%H:%M:%S"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

ENV_LEVEL = "DISTROPKG_LOG_LEVEL"
ENV_FILE = "DISTROPKG_LOG_FILE"
ENV_FILE_LEVEL = "DISTROPKG_LOG_FILE_LEVEL"


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level from CLI flags, then DISTROPKG_LOG_LEVEL."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return (environ or {}).get(ENV_LEVEL) or "WARNING"


def setup_logging(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Configure the root logger for the whole process.

    The console level comes from ``resolve_level``.  When
    DISTROPKG_LOG_FILE is set, a file handler is added at
    DISTROPKG_LOG_FILE_LEVEL (default: the console level); DEBUG there
    captures the full output of every native command.

    Returns:
        The numeric console level.
    """
    environ = environ or {}
    console_level = _parse_level(
        resolve_level(debug=debug, verbose=verbose, quiet=quiet, environ=environ)
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_console_handler(console_level))
    root_level = console_level

    log_file = environ.get(ENV_FILE)
    if log_file:
        file_level = _parse_level(environ.get(ENV_FILE_LEVEL)) if environ.get(ENV_FILE_LEVEL) else console_level
        root.addHandler(_file_handler(log_file, file_level))
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False
    return console_level


def _console_handler(level: int) -> logging.Handler:
    if level <= logging.DEBUG:
        fmt = _FMT_DEBUG
    elif level <= logging.INFO:
        fmt = _FMT_INFO
    else:
        fmt = _FMT_CONSOLE
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=_DATEFMT_CONSOLE))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
    return handler


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else logging.WARNING
