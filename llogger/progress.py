"""
Progress indicators (spinners) and their lifecycle.

A ProgressHandle is what `logger.info.spin("Building")` returns. The caller
owns it and drives it with `update()`, `success()`, `fail()` or `stop()`;
the multiplexer only reads it to draw frames and nudges its animation step.

Lifecycle:

    PENDING --start()--> RUNNING --success()--> SUCCEEDED
                                 --fail()-----> FAILED
                                 --stop()-----> STOPPED

Every arrow out of RUNNING is taken at most once. Calls that arrive after
the handle finished (a late `update()` from a task racing its own
completion, a second `success()`) are silently ignored.

Two kinds of indicator exist, chosen once when the handle is created:

  - TERMINAL: registered with the multiplexer and redrawn in place.
  - NON_INTERACTIVE: for pipes, files and CI logs. It prints one line when
    it starts, one when it finishes, and a heartbeat line in between so a
    long task does not look hung.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Literal

from .colors import (
    CONSOLE_FAIL_STYLE,
    CONSOLE_RUNNING_STYLE,
    CONSOLE_SUCCESS_STYLE,
    FAIL_STYLE,
    SPINNER_STYLE,
    SUCCESS_STYLE,
    colorize,
)
from .buffer import TAB_REPLACEMENT
from .config import HEARTBEAT_INTERVAL
from .console import error_console
from .utils import format_date, format_duration

if TYPE_CHECKING:
    from .logger import Logger
    from .multiplexer import TerminalMultiplexer

DEFAULT_SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
DEFAULT_SUCCESS_ICON = "✔"
DEFAULT_FAIL_ICON = "✖"
DEFAULT_CONSOLE_RUNNING_ICON = "-"

# Separates animation frames in a running icon given as one string: "a||b||c"
FRAME_SEPARATOR = "||"


class ProgressState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    STOPPED = "stopped"

    @property
    def finished(self) -> bool:
        return self in (ProgressState.SUCCEEDED, ProgressState.FAILED, ProgressState.STOPPED)


class IndicatorKind(Enum):
    NON_INTERACTIVE = "non_interactive"
    TERMINAL = "terminal"


@dataclass
class SpinnerOptions:
    """Rendering options for one indicator.

    `prefix=False` suppresses the whole prefix, level label included. A
    `None` icon means "use the default for this kind of indicator"; an empty
    string means "no icon".
    """

    prefix: str | Literal[False] | None = None
    date: bool = False
    duration: bool = False
    running_icon: str | Sequence[str] | None = None
    success_icon: str | None = None
    fail_icon: str | None = None


def parse_frames(icon: str | Sequence[str]) -> tuple[str, ...]:
    """Split a running icon into animation frames."""
    if isinstance(icon, str):
        return tuple(icon.split(FRAME_SEPARATOR))
    return tuple(icon)


class ProgressHandle:
    """One live progress indicator."""

    def __init__(
        self,
        logger: Logger,
        level: str,
        text: str = "",
        options: SpinnerOptions | None = None,
        *,
        kind: IndicatorKind = IndicatorKind.TERMINAL,
        multiplexer: TerminalMultiplexer | None = None,
    ):
        self.logger = logger
        self.level = level
        self.text = str(text)
        self.options = options or SpinnerOptions()
        self.kind = kind
        self.multiplexer = multiplexer if multiplexer is not None else logger.multiplexer

        self.state = ProgressState.PENDING
        self.started_at: datetime | None = None
        self.stopped_at: datetime | None = None

        # Heartbeat count of a non-interactive indicator, shown as trailing dots
        self.iteration = 0

        self._frames = self._running_frames()
        self._frame_index = 0
        self._heartbeat = None

    def __repr__(self) -> str:
        return f"<ProgressHandle {self.state.value} {self.text!r}>"

    # --- icons ---

    @property
    def frames(self) -> tuple[str, ...]:
        return self._frames

    @property
    def frame_index(self) -> int:
        return self._frame_index

    @property
    def icon(self) -> str | None:
        """The glyph the next frame will show, or None for no icon."""
        if not self._frames:
            return None
        return self._frames[self._frame_index] or None

    def _running_frames(self) -> tuple[str, ...]:
        if self.options.running_icon is not None:
            return parse_frames(self.options.running_icon)
        color = self.logger.color
        if self.kind is IndicatorKind.TERMINAL:
            return tuple(colorize(frame, SPINNER_STYLE, color) for frame in DEFAULT_SPINNER_FRAMES)
        return (colorize(f" {DEFAULT_CONSOLE_RUNNING_ICON} ", CONSOLE_RUNNING_STYLE, color),)

    def _final_icon(self, succeeded: bool) -> str:
        custom = self.options.success_icon if succeeded else self.options.fail_icon
        if custom is not None:
            return custom
        glyph = DEFAULT_SUCCESS_ICON if succeeded else DEFAULT_FAIL_ICON
        if self.kind is IndicatorKind.TERMINAL:
            style = SUCCESS_STYLE if succeeded else FAIL_STYLE
            return colorize(glyph, style, self.logger.color)
        style = CONSOLE_SUCCESS_STYLE if succeeded else CONSOLE_FAIL_STYLE
        return colorize(f" {glyph} ", style, self.logger.color)

    def advance_frame(self) -> None:
        """Move to the next animation frame. Called by the animation tick only."""
        with self.multiplexer.lock:
            if self.state is ProgressState.RUNNING and len(self._frames) > 1:
                self._frame_index = (self._frame_index + 1) % len(self._frames)

    # --- lifecycle ---

    def start(self) -> None:
        with self.multiplexer.lock:
            if self.state is not ProgressState.PENDING or not self.logger.is_enabled:
                return
            self.started_at = datetime.now()
            self.state = ProgressState.RUNNING
            if self.kind is IndicatorKind.TERMINAL:
                self.multiplexer.register(self)
                # Only when registering did not put the multiplexer in charge of redraws
                if not self.multiplexer.active:
                    self._emit()
            else:
                self.iteration = 1
                self._emit()
                self._start_heartbeat()

    def update(self, text: str) -> None:
        with self.multiplexer.lock:
            if not self.state.finished:
                self.text = str(text)

    def success(self, text: str | None = None) -> None:
        self._finish(ProgressState.SUCCEEDED, text, self._final_icon(succeeded=True))

    def fail(self, text: str | None = None) -> None:
        self._finish(ProgressState.FAILED, text, self._final_icon(succeeded=False))

    def stop(self) -> None:
        self._finish(ProgressState.STOPPED)

    def _finish(self, state: ProgressState, text: str | None = None, icon: str | None = None):
        with self.multiplexer.lock:
            if self.state is not ProgressState.RUNNING:
                return
            if text is not None:
                self.text = str(text)
            if icon is not None:
                self._frames = (icon,)
                self._frame_index = 0
            self.state = state
            self.stopped_at = datetime.now()
            self._cancel_heartbeat()
            if self.kind is IndicatorKind.TERMINAL and self.multiplexer.release(self):
                return
            self._emit()

    # --- output ---

    def render(self, with_level_prefix: bool = True) -> str:
        """Build the line the next frame will show for this indicator.

        Terminal order: level label, custom prefix, start timestamp, elapsed
        time, icon, text. A non-interactive indicator puts its badge right
        after the prefixes so the timestamps line up with the text. Tabs are
        expanded so the line is as wide on screen as it is measured. Calling
        this never changes the handle.
        """
        parts: list[str] = []
        if self.options.prefix is not False:
            if with_level_prefix:
                parts.append(self.logger.get_prefix(self.level))
            if self.options.prefix:
                parts.append(self.options.prefix)
        times: list[str] = []
        if self.options.date and self.started_at:
            times.append(format_date(self.started_at))
        if self.options.duration and self.started_at:
            times.append(format_duration((self.stopped_at or datetime.now()) - self.started_at))
        icon = [self.icon] if self.icon else []
        if self.kind is IndicatorKind.NON_INTERACTIVE:
            parts += icon + times
        else:
            parts += times + icon
        text = self.text
        if (
            self.kind is IndicatorKind.NON_INTERACTIVE
            and not self.options.duration
            and self.state is ProgressState.RUNNING
        ):
            text += " " + "." * self.iteration
        parts.append(text)
        return " ".join(parts).replace("\t", TAB_REPLACEMENT)

    def _emit(self) -> None:
        try:
            line = self.render()
        except Exception as e:
            error_console.print(f"[red]llogger: could not render {self!r}: {e}[/red]")
            line = str(self.text)
        self.logger.emit(line)

    def _start_heartbeat(self) -> None:
        self._heartbeat = self.multiplexer.ticker_factory(
            HEARTBEAT_INTERVAL, self._on_heartbeat, name="llogger-heartbeat"
        )
        self._heartbeat.start()

    def _cancel_heartbeat(self) -> None:
        if self._heartbeat is not None:
            self._heartbeat.cancel()
            self._heartbeat = None

    def _on_heartbeat(self) -> None:
        with self.multiplexer.lock:
            if self.state is ProgressState.RUNNING:
                self.iteration += 1
                self._emit()

    # --- context manager ---

    def __enter__(self) -> ProgressHandle:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> Literal[False]:
        if exc_type is None:
            self.success()
        else:
            self.fail()
        return False
