"""
Low-level terminal access for the multiplexer.

TerminalWriter is the only place that knows about escape sequences, signal
handlers and the underlying file object. Everything above it deals in plain
strings and row counts.

The control sequences come from Rich's `Control` class rather than being
spelled out by hand:

  - `Control.move_to_column(0)`  -> ESC[1G   cursor to the first column
  - `Control.move(0, -1)`        -> ESC[1A   cursor up one row
  - ERASE_IN_LINE with mode 2    -> ESC[2K   clear the whole row
  - `Control.show_cursor(bool)`  -> ESC[?25h / ESC[?25l

Erase helpers *return* strings instead of writing them, so the multiplexer
can glue erase + new content into a single write per frame. A frame split
across several writes could interleave with another writer of the same
stream and leave the screen torn.
"""

import signal
import threading
from collections.abc import Callable

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType

from .console import console as shared_console

_ERASE_LINE = Control((ControlType.ERASE_IN_LINE, 2))


class TerminalWriter:
    """Raw writes and cursor control on a Rich console's output file."""

    def __init__(self, console: Console | None = None):
        self.console = console or shared_console
        self._resize_callback: Callable[[], None] | None = None
        self._previous_handler = None
        self._installed = False

    @property
    def is_interactive(self) -> bool:
        """True when the stream is a real terminal that understands cursor movement."""
        return self.console.is_terminal and not self.console.is_dumb_terminal

    @property
    def width(self) -> int:
        # Queried on every frame; the terminal may have been resized since the last one
        return max(1, self.console.width)

    def erase(self, rows: int) -> str:
        """Sequence clearing `rows` rows, ending at column 0 of the topmost one.

        The cursor is assumed to sit on the last row of the previous frame.
        With `rows == 0` it only returns to the first column.
        """
        codes = [str(Control.move_to_column(0))]
        for index in range(rows):
            if index > 0:
                codes.append(str(Control.move(0, -1)))
            codes.append(str(_ERASE_LINE))
        return "".join(codes)

    def cursor(self, show: bool) -> str:
        return str(Control.show_cursor(show))

    def write(self, text: str) -> None:
        """Write `text` in one call and flush. Exceptions propagate to the caller."""
        file = self.console.file
        file.write(text)
        file.flush()

    def hide_cursor(self) -> None:
        self.write(self.cursor(False))

    def show_cursor(self) -> None:
        self.write(self.cursor(True))

    def subscribe_resize(self, callback: Callable[[], None]) -> bool:
        """Call `callback` when the terminal is resized.

        Uses SIGWINCH, which only exists on POSIX and can only be installed
        from the main thread. Returns False when it could not be installed;
        the multiplexer then notices resizes by polling the width.

        Any handler that was already installed keeps being called.
        """
        if self._installed:
            self._resize_callback = callback
            return True
        sigwinch = getattr(signal, "SIGWINCH", None)
        if sigwinch is None or threading.current_thread() is not threading.main_thread():
            return False
        try:
            self._previous_handler = signal.signal(sigwinch, self._on_sigwinch)
        except (ValueError, OSError):
            return False
        self._installed = True
        self._resize_callback = callback
        return True

    def unsubscribe_resize(self) -> None:
        self._resize_callback = None
        if not self._installed or threading.current_thread() is not threading.main_thread():
            # Left installed but inert; restored by the next main-thread unsubscribe
            return
        previous = self._previous_handler
        try:
            signal.signal(signal.SIGWINCH, previous if previous is not None else signal.SIG_DFL)
        except (ValueError, OSError):
            return
        self._previous_handler = None
        self._installed = False

    def _on_sigwinch(self, signum, frame) -> None:
        if self._resize_callback is not None:
            self._resize_callback()
        previous = self._previous_handler
        if callable(previous):
            previous(signum, frame)
