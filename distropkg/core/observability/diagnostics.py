"""
Diagnostics — loud, line-numbered failure reporting.

The deployment scripts that drive this package expect failures in a
fixed shape::

    [Call Trace]
    path/to/file.py:42:function_name
    ...
    [ERROR] path/to/file.py:42 message

``err`` and ``warn`` print a single line; ``die`` prints the trace,
the error line, and terminates the process.  When a log directory is
configured, error lines are also appended to ``<log_dir>/error.log``.
"""

from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from types import TracebackType
from typing import NoReturn, TextIO

import click

from distropkg.core.errors import DistroPkgError

logger = logging.getLogger(__name__)

ERROR_LOG_NAME = "error.log"


def _location(tb: TracebackType | None) -> str:
    """``file:line`` of the innermost frame, or of our caller's caller."""
    if tb is not None:
        frames = traceback.extract_tb(tb)
        if frames:
            last = frames[-1]
            return f"{last.filename}:{last.lineno}"
    stack = traceback.extract_stack(limit=3)
    caller = stack[0]
    return f"{caller.filename}:{caller.lineno}"


def backtrace(tb: TracebackType | None = None) -> list[str]:
    """Render ``[Call Trace]`` lines, outermost frame first."""
    frames = traceback.extract_tb(tb) if tb is not None else traceback.extract_stack()[:-1]
    lines = ["[Call Trace]"]
    lines.extend(f"{f.filename}:{f.lineno}:{f.name}" for f in frames)
    return lines


def _append_error_log(log_dir: Path | None, line: str) -> None:
    if log_dir is None:
        return
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        with open(log_dir / ERROR_LOG_NAME, "a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError as exc:
        logger.warning("Cannot append to %s: %s", log_dir / ERROR_LOG_NAME, exc)


def err(
    message: str,
    *,
    log_dir: Path | None = None,
    tb: TracebackType | None = None,
    stream: TextIO | None = None,
) -> str:
    """Print an ``[ERROR] file:line message`` line and return it."""
    line = f"[ERROR] {_location(tb)} {message}"
    click.echo(line, file=stream or sys.stderr)
    _append_error_log(log_dir, line)
    return line


def warn(message: str, *, stream: TextIO | None = None) -> str:
    """Print a ``[WARNING] file:line message`` line and return it."""
    line = f"[WARNING] {_location(None)} {message}"
    click.echo(line, file=stream or sys.stdout)
    return line


def die(
    exc: BaseException,
    *,
    log_dir: Path | None = None,
    stream: TextIO | None = None,
) -> NoReturn:
    """Report ``exc`` with its call trace and terminate the process.

    The exit code comes from ``exc.exit_code`` for distropkg errors and
    is 1 for anything else.
    """
    out = stream or sys.stderr
    tb = exc.__traceback__
    for line in backtrace(tb):
        click.echo(line, file=out)
    err(str(exc) or exc.__class__.__name__, log_dir=log_dir, tb=tb, stream=out)

    exit_code = exc.exit_code if isinstance(exc, DistroPkgError) else 1
    sys.exit(exit_code or 1)
