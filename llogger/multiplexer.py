"""
Terminal output multiplexer: many spinners plus ordinary log lines, one stream.

While at least one terminal spinner is running, the multiplexer owns the
terminal. It redraws the spinners in place every tick and holds back every
other line llogger wants to print until the next redraw, so a log line can
never land in the middle of a half-drawn frame.

A frame, written with a single `write()` call, looks like this:

    <erase the rows the previous frame's spinners occupied>
    pending line 1          <- scroll-back from here up, never erased
    pending line 2
    spinner A               <- redrawn next tick
    spinner B

The only thing erased is the spinner region of the previous frame, and its
size must be known exactly: `occupied_rows` is the number of terminal rows
those spinner lines took *at the width in effect when they were drawn*. Too
few and stale spinner text stays on screen; too many and real output gets
wiped. After a resize the old lines re-wrap, so the count is recomputed at
the new width before the next erase (`on_resize`).

Lifecycle:

    IDLE --first spinner registers--> ACTIVE --last spinner finishes--> IDLE

Entering ACTIVE hides the cursor, listens for SIGWINCH and starts two
tickers: one advances spinner animation frames, the other redraws. Leaving
it flushes one final frame, prints a newline, shows the cursor again and
cancels both tickers.

Threading model:
  The tickers run on their own threads and logging calls come from anywhere,
  so every read or write of the live set, the pending buffer and
  `occupied_rows` happens under one re-entrant lock. A redraw therefore
  always sees a consistent snapshot; a `stop()` issued mid-redraw waits and
  shows up in the next frame.

Not a terminal?
  When the stream cannot do cursor movement (pipe, file, CI log, dumb
  terminal) the multiplexer never becomes ACTIVE. Lines are written
  straight through and spinners fall back to printing plain lines.
"""

import atexit
import threading
from collections.abc import Callable
from enum import Enum
from functools import partial

from .buffer import FrameBuffer
from .config import REFRESH_INTERVAL
from .console import error_console
from .height import content_height
from .progress import ProgressHandle
from .terminal import TerminalWriter
from .ticker import Ticker

# Failures a write to a closing or broken stream can raise
WRITE_ERRORS = (OSError, ValueError)


class MultiplexerState(Enum):
    IDLE = "idle"
    ACTIVE = "active"


class TerminalMultiplexer:
    """Schedules and renders every live spinner on one terminal stream."""

    def __init__(
        self,
        writer: TerminalWriter | None = None,
        *,
        interval: float = REFRESH_INTERVAL,
        ticker_factory: Callable[..., Ticker] = Ticker,
    ):
        self.writer = writer or TerminalWriter()
        self.interval = interval
        self.ticker_factory = ticker_factory
        self.lock = threading.RLock()

        self.state = MultiplexerState.IDLE
        # dict as an insertion-ordered set: frames list spinners in registration order
        self.live_handles: dict[ProgressHandle, None] = {}
        self.pending_lines = FrameBuffer()
        self.occupied_rows = 0

        # Spinner lines of the last written frame and the width they were measured at
        self.last_frame: list[str] = []
        self.frame_width: int | None = None

        self._animation_ticker: Ticker | None = None
        self._redraw_ticker: Ticker | None = None
        self._resize_pending = False
        self._write_failed = False
        self._render_failed = False
        # Bumped on every activation; ticks from an earlier ACTIVE period are ignored
        self._generation = 0

    @property
    def active(self) -> bool:
        return self.state is MultiplexerState.ACTIVE

    @property
    def is_interactive(self) -> bool:
        return self.writer.is_interactive

    # --- entry points used by handles and loggers ---

    def register(self, handle: ProgressHandle) -> None:
        """Add a running handle to the live set, entering ACTIVE if needed."""
        with self.lock:
            self.live_handles[handle] = None
            if not self.active and self.writer.is_interactive:
                self._activate()

    def release(self, handle: ProgressHandle) -> bool:
        """Remove a finished handle and queue its last rendering for scroll-back.

        Returns False when the multiplexer is not ACTIVE; the caller must then
        print its final line itself. Releasing the last live handle tears
        periodic mode down after one final flush.
        """
        with self.lock:
            self.live_handles.pop(handle, None)
            if not self.active:
                return False
            self.pending_lines.append(self._render(handle))
            if not self.live_handles:
                self.finish()
            return True

    def emit_line(self, text: str) -> None:
        """Print an ordinary line without tearing any spinner frame.

        While ACTIVE the line waits for the next redraw. Otherwise there is
        nothing on screen to protect and it is written immediately.
        """
        with self.lock:
            if self.active:
                self.pending_lines.append(text)
                return
            try:
                self.writer.write(text + "\n")
            except WRITE_ERRORS as e:
                self._report_write_failure(e, [text])
            else:
                self._write_failed = False

    # --- periodic mode ---

    def _activate(self) -> None:
        self.state = MultiplexerState.ACTIVE
        self._write_failed = False
        self._render_failed = False
        self._generation += 1
        try:
            self.writer.hide_cursor()
        except WRITE_ERRORS as e:
            self._report_write_failure(e)
        self.writer.subscribe_resize(self.request_resize)
        self._animation_ticker = self.ticker_factory(
            self.interval, partial(self.animate, self._generation), name="llogger-animation"
        )
        self._redraw_ticker = self.ticker_factory(
            self.interval, partial(self.tick, self._generation), name="llogger-redraw"
        )
        self._animation_ticker.start()
        self._redraw_ticker.start()
        self.redraw()

    def _stale(self, generation: int | None) -> bool:
        return not self.active or (generation is not None and generation != self._generation)

    def animate(self, generation: int | None = None) -> None:
        """Animation tick: advance every live spinner by one frame. Never writes."""
        with self.lock:
            if self._stale(generation):
                return
            for handle in list(self.live_handles):
                handle.advance_frame()

    def tick(self, generation: int | None = None) -> None:
        """Redraw tick. Also picks up resizes signalled or detected since the last frame."""
        with self.lock:
            if self._stale(generation):
                return
            if self._resize_pending or (
                self.frame_width is not None and self.writer.width != self.frame_width
            ):
                self.on_resize()
            else:
                self.redraw()

    def request_resize(self) -> None:
        # Runs inside a signal handler, possibly while this thread holds the lock
        # mid-frame. Only flag it; the redraw ticker does the work.
        self._resize_pending = True

    def on_resize(self) -> None:
        """Re-measure the spinner lines on screen at the new width, then redraw."""
        with self.lock:
            self._resize_pending = False
            if not self.active:
                return
            width = self.writer.width
            self.occupied_rows = sum(content_height(line, width) for line in self.last_frame)
            self.frame_width = width
            self.redraw()

    def redraw(self) -> bool:
        """Write one frame: erase, pending lines, live spinners.

        Returns False when the write failed. In that case nothing is
        consumed: pending lines stay queued and `occupied_rows` still
        describes what is actually on screen, so the next tick retries.
        """
        with self.lock:
            if not self.active:
                return False
            width = self.writer.width
            rendered = [self._render(handle) for handle in self.live_handles]
            body = "\n".join([*self.pending_lines, *rendered])
            try:
                self.writer.write(self.writer.erase(self.occupied_rows) + body)
            except WRITE_ERRORS as e:
                self._report_write_failure(e)
                return False
            self.pending_lines.drain()
            self.last_frame = rendered
            self.frame_width = width
            self.occupied_rows = sum(content_height(line, width) for line in rendered)
            return True

    def finish(self) -> None:
        """Leave periodic mode: flush a final frame and hand the terminal back.

        The teardown half always runs, even if the flush raised, so the
        cursor is shown again and the tickers stop.
        """
        with self.lock:
            if not self.active:
                return
            try:
                if not self.redraw():
                    # Best effort: lines that never made it to the terminal go to stderr
                    self._fallback(self.pending_lines.drain())
            finally:
                self._teardown()

    def _teardown(self) -> None:
        try:
            self.writer.write("\n" + self.writer.cursor(True))
        except WRITE_ERRORS as e:
            self._report_write_failure(e)
        self.writer.unsubscribe_resize()
        for ticker in (self._animation_ticker, self._redraw_ticker):
            if ticker is not None:
                ticker.cancel()
        self._animation_ticker = None
        self._redraw_ticker = None
        self.live_handles.clear()
        self.last_frame = []
        self.frame_width = None
        self.occupied_rows = 0
        self._resize_pending = False
        self.state = MultiplexerState.IDLE

    # --- failures ---

    def _render(self, handle: ProgressHandle) -> str:
        """Render one spinner line; a handle that cannot render shows its bare text."""
        try:
            return handle.render()
        except Exception as e:
            if not self._render_failed:
                self._render_failed = True
                error_console.print(f"[red]llogger: could not render {handle!r}: {e}[/red]")
            return str(handle.text)

    def _report_write_failure(self, error: Exception, lines: list[str] | None = None) -> None:
        if not self._write_failed:
            self._write_failed = True
            error_console.print(f"[red]llogger: terminal write failed: {error}[/red]")
        if lines:
            self._fallback(lines)

    def _fallback(self, lines: list[str]) -> None:
        for line in lines:
            try:
                error_console.out(line, highlight=False)
            except WRITE_ERRORS:
                # stderr is gone too; nothing left to write to
                return


_multiplexer: TerminalMultiplexer | None = None
_multiplexer_lock = threading.Lock()


def get_multiplexer() -> TerminalMultiplexer:
    """Return the process-wide multiplexer, creating it on first use."""
    global _multiplexer
    with _multiplexer_lock:
        if _multiplexer is None:
            _multiplexer = TerminalMultiplexer()
        return _multiplexer


def set_multiplexer(multiplexer: TerminalMultiplexer | None) -> TerminalMultiplexer | None:
    """Replace the process-wide multiplexer and return the previous one."""
    global _multiplexer
    with _multiplexer_lock:
        previous, _multiplexer = _multiplexer, multiplexer
        return previous


def _shutdown() -> None:
    """Restore the terminal if the interpreter exits with spinners still running."""
    if _multiplexer is not None:
        _multiplexer.finish()


atexit.register(_shutdown)
