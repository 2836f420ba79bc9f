"""
Utility functions for llogger.

Small, stateless helpers shared by the logger and the progress handles:
  - Timestamp and elapsed-time prefixes
  - Caller identification (used as the default key for rate-limited loggers)
  - Package version lookup for the demo header

They take inputs and produce strings without touching the terminal, which
keeps them trivial to test.
"""

import inspect
import logging
import os
from datetime import datetime, timedelta
from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    """Get the installed package version, or "dev" when running from source."""
    try:
        return version("llogger")
    except PackageNotFoundError:
        return "dev"


def format_date(moment: datetime) -> str:
    """Render a wall-clock prefix such as `[2024-03-01 14:05:09.042]`.

    Millisecond precision is enough to order lines emitted from concurrent
    tasks without making every line noticeably longer.
    """
    return f"[{moment:%Y-%m-%d %H:%M:%S}.{moment.microsecond // 1000:03d}]"


def format_duration(elapsed: timedelta | float) -> str:
    """Render an elapsed-time prefix such as `[+1.234s]`.

    Accepts either a `timedelta` (spinner start/stop difference) or a float
    number of seconds (time since the previous log call).
    """
    seconds = elapsed.total_seconds() if isinstance(elapsed, timedelta) else elapsed
    return f"[+{seconds:.3f}s]"


def caller_key(depth: int = 2) -> str:
    """Identify the call site `depth` frames above this function as `file:line`.

    `Logger.once()` and `Logger.limit()` use this as their default key, so
    that each call site gets its own counter without the caller having to
    invent a name.
    """
    frame = inspect.currentframe()
    try:
        for _ in range(depth):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            return "<unknown>"
        return f"{frame.f_code.co_filename}:{frame.f_lineno}"
    finally:
        # Frames reference their locals; drop ours to avoid a reference cycle
        del frame


# Frames from these directories are plumbing, not the code that logged
_INTERNAL_DIRS = (
    os.path.dirname(os.path.abspath(__file__)),
    os.path.dirname(os.path.abspath(logging.__file__)),
)


def external_caller() -> tuple[str, int, str] | None:
    """Find the nearest frame outside llogger and `logging` as (file, line, function).

    Used by `Logger(stack=True)`. Skipping whole directories rather than a
    fixed number of frames keeps it correct whether the call came through
    `logger.info(...)`, a LimitedLogger or the stdlib logging bridge.
    """
    frame = inspect.currentframe()
    try:
        while frame is not None:
            filename = frame.f_code.co_filename
            if os.path.dirname(os.path.abspath(filename)) not in _INTERNAL_DIRS:
                return filename, frame.f_lineno, frame.f_code.co_name
            frame = frame.f_back
        return None
    finally:
        del frame


def format_caller(filename: str, line: int, function: str) -> str:
    """`(function @ file.py:12)`, or `(file.py:12)` for module-level code."""
    location = f"{os.path.basename(filename)}:{line}"
    if function == "<module>":
        return f"({location})"
    return f"({function} @ {location})"
