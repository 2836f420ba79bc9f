"""
Shared fixtures for the llogger test suite.

The multiplexer normally runs on two background threads ticking every 80ms.
That is hopeless for precise assertions, so most tests swap in:

  - **FakeTicker**: a ticker that never starts a thread. Tests call
    `fire()` to run exactly one animation or redraw tick when they want it.

  - **RecordingWriter**: a real TerminalWriter (real escape sequences, real
    width handling) on an in-memory Rich console, which also records every
    individual `write()` call. One call is one frame, so `writes` is the
    frame history.

The console is forced into terminal mode with a fixed width and a sane
TERM, so the multiplexer believes it is talking to an interactive terminal.
"""

import io

import pytest
from rich.console import Console

from llogger.logger import Logger
from llogger.multiplexer import TerminalMultiplexer
from llogger.terminal import TerminalWriter


class FakeTicker:
    def __init__(self, interval, callback, name=""):
        self.interval = interval
        self.callback = callback
        self.name = name
        self.started = False
        self.cancelled = False

    @property
    def running(self):
        return self.started and not self.cancelled

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self, times=1):
        for _ in range(times):
            self.callback()


class FakeTickerFactory:
    def __init__(self):
        self.tickers = []

    def __call__(self, interval, callback, name=""):
        ticker = FakeTicker(interval, callback, name)
        self.tickers.append(ticker)
        return ticker

    def latest(self, name):
        """Most recently created ticker called `name`."""
        for ticker in reversed(self.tickers):
            if ticker.name == name:
                return ticker
        raise LookupError(name)

    @property
    def animation(self):
        return self.latest("llogger-animation")

    @property
    def redraw(self):
        return self.latest("llogger-redraw")


class RecordingWriter(TerminalWriter):
    """TerminalWriter that keeps every write and never touches signal handlers."""

    def __init__(self, console):
        super().__init__(console)
        self.writes = []
        self.fail = False
        self.resize_callback = None

    def write(self, text):
        if self.fail:
            raise OSError("broken pipe")
        self.writes.append(text)
        super().write(text)

    def subscribe_resize(self, callback):
        self.resize_callback = callback
        return True

    def unsubscribe_resize(self):
        self.resize_callback = None


def make_console(width=40, terminal=True, term="xterm-256color"):
    return Console(
        file=io.StringIO(),
        force_terminal=terminal,
        width=width,
        color_system=None,
        _environ={"TERM": term},
    )


@pytest.fixture
def tickers():
    return FakeTickerFactory()


@pytest.fixture
def writer():
    return RecordingWriter(make_console())


@pytest.fixture
def mux(writer, tickers):
    return TerminalMultiplexer(writer, interval=0.08, ticker_factory=tickers)


@pytest.fixture
def log(mux):
    """A plain, uncoloured logger: prefixes are exactly "[INFO]", "[ERROR]", ..."""
    return Logger(color=False, pad=False, date=False, duration=False, stack=False, multiplexer=mux)


@pytest.fixture
def pipe_writer():
    """Writer on a non-terminal stream, as when output is piped to a file."""
    return RecordingWriter(make_console(terminal=False))


@pytest.fixture
def pipe_mux(pipe_writer, tickers):
    return TerminalMultiplexer(pipe_writer, interval=0.08, ticker_factory=tickers)


@pytest.fixture
def pipe_log(pipe_mux):
    return Logger(
        color=False, pad=False, date=False, duration=False, stack=False, multiplexer=pipe_mux
    )
