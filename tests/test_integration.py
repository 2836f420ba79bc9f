"""
End-to-end run with real ticker threads.

Everything else in the suite fires ticks by hand. This drives a few spinners
and log calls from worker threads against a multiplexer ticking every 10ms,
then checks that the frame history is coherent once everything settles.
"""

import threading
import time

from conftest import RecordingWriter, make_console

from llogger.logger import Logger
from llogger.multiplexer import MultiplexerState, TerminalMultiplexer

SHOW = "\x1b[?25h"
HIDE = "\x1b[?25l"


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return False


class TestThreadedRun:
    def setup_method(self):
        self.writer = RecordingWriter(make_console(width=60))
        self.mux = TerminalMultiplexer(self.writer, interval=0.01)
        self.log = Logger(color=False, pad=False, date=False, duration=False, multiplexer=self.mux)

    def teardown_method(self):
        self.mux.finish()

    def test_concurrent_spinners_and_lines(self):
        started = threading.Barrier(3)

        def worker(index):
            spinner = self.log.info.spin(f"task {index}", running_icon="a||b")
            started.wait()
            for step in range(3):
                self.log.debug(f"task {index} step {step}")
                time.sleep(0.01)
            spinner.success(f"task {index} done")

        threads = [threading.Thread(target=worker, args=(index,)) for index in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(5)

        assert wait_for(lambda: self.mux.state is MultiplexerState.IDLE)
        assert self.writer.writes[0] == HIDE
        assert self.writer.writes[-1] == "\n" + SHOW
        assert self.writer.writes.count(HIDE) == 1

        output = "".join(self.writer.writes)
        for index in range(3):
            assert f"[INFO] ✔ task {index} done" in output
            for step in range(3):
                assert output.count(f"[DEBUG] task {index} step {step}") == 1

    def test_redraw_thread_animates(self):
        spinner = self.log.info.spin("spinning", running_icon="a||b")
        assert wait_for(lambda: any(w.endswith("[INFO] b spinning") for w in self.writer.writes))
        spinner.stop()

        written = len(self.writer.writes)
        time.sleep(0.05)
        assert len(self.writer.writes) == written
