"""
Leveled logger front-end.

This is the surface application code talks to:

    from llogger import logger

    logger.info("Connected to", url)
    with logger.info.spin("Building wheel") as spinner:
        spinner.update("Building wheel (linking)")

Every level is a callable attribute that also carries a `spin()` method, so
a spinner is logged at a level exactly like a regular line. All output,
spinner or not, ends up in `TerminalMultiplexer.emit_line`, which is what
keeps a plain `logger.info(...)` from tearing a spinner that is being
redrawn.

Levels only provide a label and a style here. There is no threshold
filtering: a message logged is a message printed, unless the logger (or
llogger as a whole, via LLOGGER_ENABLED) is disabled.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from rich.pretty import pretty_repr

from . import config
from .colors import colorize
from .console import error_console
from .multiplexer import TerminalMultiplexer, get_multiplexer
from .progress import IndicatorKind, ProgressHandle, SpinnerOptions
from .utils import caller_key, external_caller, format_caller, format_date, format_duration


@dataclass(frozen=True)
class LevelInfo:
    label: str
    style: str


# Ordered from most to least severe
LEVELS: dict[str, LevelInfo] = {
    "emerg": LevelInfo("EMERGENCY", "white on red"),
    "alert": LevelInfo("ALERT", "white on red"),
    "crit": LevelInfo("CRITICAL", "white on red"),
    "error": LevelInfo("ERROR", "white on red"),
    "warn": LevelInfo("WARNING", "white on dark_orange"),
    "notice": LevelInfo("NOTICE", "white on blue"),
    "info": LevelInfo("INFO", "white on grey50"),
    "verb": LevelInfo("VERBOSE", "white on green"),
    "debug": LevelInfo("DEBUG", "black on yellow"),
    "wth": LevelInfo("WHO CARES?", "black on grey85"),
}

LABEL_WIDTH = max(len(info.label) for info in LEVELS.values())

# The one logger allowed to print while set, see Logger.exclusive
_exclusive: Logger | None = None


def padded_label(label: str, width: int = LABEL_WIDTH) -> str:
    """Centre `label` in `width` columns, odd padding going to the left."""
    extra = max(0, width - len(label))
    right = extra // 2
    return " " * (extra - right) + label + " " * right


def format_args(args: Sequence[Any]) -> str:
    return " ".join(arg if isinstance(arg, str) else pretty_repr(arg) for arg in args)


class LevelMethod:
    """`logger.info(...)` logs a line; `logger.info.spin(...)` starts a spinner."""

    def __init__(self, logger: Logger, level: str):
        self.logger = logger
        self.level = level

    def __call__(self, *args: Any) -> None:
        self.logger.log(self.level, *args)

    def spin(self, text: str, **options: Any) -> ProgressHandle:
        return self.logger.spin(self.level, text, **options)


class Logger:
    """A named source of log lines and spinners sharing the process multiplexer."""

    emerg: LevelMethod
    alert: LevelMethod
    crit: LevelMethod
    error: LevelMethod
    warn: LevelMethod
    notice: LevelMethod
    info: LevelMethod
    verb: LevelMethod
    debug: LevelMethod
    wth: LevelMethod

    def __init__(
        self,
        scope: str | None = None,
        *,
        enabled: bool = True,
        color: bool | None = None,
        date: bool | None = None,
        duration: bool | None = None,
        pad: bool | None = None,
        stack: bool | None = None,
        multiplexer: TerminalMultiplexer | None = None,
    ):
        self.scope = scope
        self.enabled = enabled
        self.color = config.COLOR if color is None else color
        self.date = config.DATE if date is None else date
        self.duration = config.DURATION if duration is None else duration
        self.pad = config.PAD if pad is None else pad
        self.stack = config.STACK if stack is None else stack
        self._multiplexer = multiplexer
        self._limits: dict[str, LimitedLogger] = {}
        self._limits_lock = threading.Lock()
        self.last_log: float | None = None
        for level in LEVELS:
            setattr(self, level, LevelMethod(self, level))

    @property
    def multiplexer(self) -> TerminalMultiplexer:
        return self._multiplexer if self._multiplexer is not None else get_multiplexer()

    @property
    def is_enabled(self) -> bool:
        return self.enabled and config.is_enabled() and (_exclusive is None or _exclusive is self)

    @property
    def exclusive(self) -> bool:
        """While a logger is exclusive, every other logger is silent."""
        return _exclusive is self

    @exclusive.setter
    def exclusive(self, value: bool) -> None:
        global _exclusive
        if value:
            _exclusive = self
        elif _exclusive is self:
            _exclusive = None

    def get_prefix(self, level: str) -> str:
        """Level label (and scope), styled as a badge or bracketed when colour is off."""
        info = LEVELS[level]
        label = padded_label(info.label) if self.pad else info.label
        if self.scope:
            label += f" <{self.scope}>"
        if self.color:
            return colorize(f" {label} ", info.style)
        return f"[{label}]"

    def log(self, level: str, *args: Any) -> None:
        """Format and print one line. Never raises."""
        try:
            if not self.is_enabled:
                return
            if level not in LEVELS:
                raise KeyError(f"Unknown log level: {level}")
            parts = [self.get_prefix(level)]
            if self.date:
                parts.append(format_date(datetime.now()))
            if self.duration:
                now = time.monotonic()
                parts.append(format_duration(now - (self.last_log if self.last_log is not None else now)))
                self.last_log = now
            if self.stack:
                caller = external_caller()
                if caller is not None:
                    parts.append(format_caller(*caller))
            parts.append(format_args(args))
            self.emit(" ".join(parts))
        except Exception as e:
            error_console.print(f"[red]llogger: {e}[/red]")

    def emit(self, line: str) -> None:
        """Send an already formatted line down the normal output path."""
        if self.is_enabled:
            self.multiplexer.emit_line(line)

    def spin(
        self,
        level: str,
        text: str,
        *,
        prefix: str | Literal[False] | None = None,
        date: bool = False,
        duration: bool | None = None,
        running_icon: str | Sequence[str] | None = None,
        success_icon: str | None = None,
        fail_icon: str | None = None,
        console: bool = False,
    ) -> ProgressHandle:
        """Start a spinner at `level` and return its handle.

        The spinner is redrawn in place when the output is an interactive
        terminal. With `console=True`, or when output is not a terminal, it
        prints plain lines instead and shows its elapsed time by default.
        """
        multiplexer = self.multiplexer
        if level not in LEVELS:
            error_console.print(f"[red]llogger: Unknown log level: {level}[/red]")
            # Never started, so every call on it is a no-op
            return ProgressHandle(self, level, text, multiplexer=multiplexer)
        if console or not multiplexer.is_interactive:
            kind = IndicatorKind.NON_INTERACTIVE
        else:
            kind = IndicatorKind.TERMINAL
        options = SpinnerOptions(
            prefix=prefix,
            date=date,
            duration=kind is IndicatorKind.NON_INTERACTIVE if duration is None else duration,
            running_icon=running_icon,
            success_icon=success_icon,
            fail_icon=fail_icon,
        )
        handle = ProgressHandle(self, level, text, options, kind=kind, multiplexer=multiplexer)
        handle.start()
        return handle

    def limit(self, count_or_key: int | str, key: str | None = None) -> LimitedLogger:
        """Return a wrapper that stops logging after `count` calls.

        Wrappers are cached per key, which defaults to the calling line, so
        `logger.limit(3).warn(...)` inside a loop warns three times in total.
        `limit("name")` fetches an existing wrapper by key.
        """
        if isinstance(count_or_key, str):
            try:
                return self._limits[count_or_key]
            except KeyError:
                raise KeyError(f"No limited logger registered under {count_or_key!r}") from None
        call_key = key if key is not None else caller_key()
        with self._limits_lock:
            if call_key not in self._limits:
                self._limits[call_key] = LimitedLogger(self, count_or_key)
            return self._limits[call_key]

    def once(self, key: str | None = None) -> LimitedLogger:
        return self.limit(1, key if key is not None else caller_key())


class LimitedLevelMethod:
    def __init__(self, limited: LimitedLogger, level: str):
        self.limited = limited
        self.level = level

    def __call__(self, *args: Any) -> None:
        self.limited.log(self.level, *args)

    def spin(self, text: str, **options: Any) -> ProgressHandle:
        if self.limited.consume():
            return self.limited.logger.spin(self.level, text, **options)
        # Never started, so every call on it is a no-op
        return ProgressHandle(self.limited.logger, self.level, text)


class LimitedLogger:
    """Same level methods as the wrapped Logger, but only for the first `count` calls."""

    emerg: LimitedLevelMethod
    alert: LimitedLevelMethod
    crit: LimitedLevelMethod
    error: LimitedLevelMethod
    warn: LimitedLevelMethod
    notice: LimitedLevelMethod
    info: LimitedLevelMethod
    verb: LimitedLevelMethod
    debug: LimitedLevelMethod
    wth: LimitedLevelMethod

    def __init__(self, logger: Logger, count: int):
        self.logger = logger
        self.count = count
        self.calls = 0
        self._lock = threading.Lock()
        for level in LEVELS:
            setattr(self, level, LimitedLevelMethod(self, level))

    @property
    def exhausted(self) -> bool:
        return self.calls >= self.count

    def consume(self) -> bool:
        """Count one call and report whether it is still within the limit."""
        with self._lock:
            if self.calls >= self.count:
                return False
            self.calls += 1
            return True

    def log(self, level: str, *args: Any) -> None:
        if self.consume():
            self.logger.log(level, *args)

    def get_prefix(self, level: str) -> str:
        return self.logger.get_prefix(level)


# The default logger used by module-level helpers
logger = Logger()


def begin_indicator(text: str, level: str = "info", **options: Any) -> ProgressHandle:
    """Start a spinner on the default logger."""
    return logger.spin(level, text, **options)
