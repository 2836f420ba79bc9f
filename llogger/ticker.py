"""
Periodic task primitive driving the spinner animation and redraw cycles.

A Ticker calls one function every `interval` seconds on a daemon thread until
it is cancelled. It is deliberately dumb: it does not know about spinners,
locks or terminals. The multiplexer owns two of them (one for animation, one
for redraws) and is responsible for serializing what the callbacks do.

Why a thread and not asyncio?
  Logging calls come from ordinary synchronous code. Requiring a running
  event loop just to animate a spinner would make `logger.info.spin(...)`
  unusable from scripts, so the ticker brings its own thread, the same way
  Rich's Live display runs its refresh loop.

Cancellation is cooperative: `cancel()` sets an Event the loop waits on, so
a pending wait wakes up immediately and no further callback starts. It never
joins the thread, because cancel is usually called while holding the lock a
running callback may be waiting for.
"""

import threading
from collections.abc import Callable

from .console import error_console


class Ticker:
    """Call `callback` every `interval` seconds until cancelled."""

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "llogger-ticker"):
        self.interval = interval
        self.callback = callback
        self.name = name
        self._cancelled = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._cancelled.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def _run(self) -> None:
        # Event.wait returns True once cancelled, which ends the loop
        while not self._cancelled.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                # A failing tick must not kill the thread and leave the cursor hidden
                error_console.print(f"[red]llogger: {self.name} tick failed: {e}[/red]")
