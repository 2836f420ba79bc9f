"""
Tests for the periodic ticker (llogger/ticker.py).

These use real threads with a very short interval and wait on Events rather
than sleeping, so they stay fast without being timing sensitive.
"""

import threading
import unittest
from unittest.mock import patch

from llogger.ticker import Ticker

TIMEOUT = 2.0


class TestTicker(unittest.TestCase):
    """Test the ticker thread lifecycle"""

    def test_not_running_before_start(self):
        """A new ticker has no thread"""
        ticker = Ticker(0.01, lambda: None)
        self.assertFalse(ticker.running)

    def test_calls_callback_repeatedly(self):
        """The callback runs on every interval until cancelled"""
        calls = []
        done = threading.Event()

        def callback():
            calls.append(threading.current_thread().name)
            if len(calls) >= 3:
                done.set()

        ticker = Ticker(0.01, callback, name="test-ticker")
        ticker.start()
        try:
            self.assertTrue(done.wait(TIMEOUT))
        finally:
            ticker.cancel()

        self.assertGreaterEqual(len(calls), 3)
        self.assertEqual(calls[0], "test-ticker")

    def test_cancel_stops_ticking(self):
        """No callback starts after cancel() returns"""
        ticked = threading.Event()
        ticker = Ticker(0.01, ticked.set)
        ticker.start()
        self.assertTrue(ticked.wait(TIMEOUT))

        ticker.cancel()
        self.assertFalse(ticker.running)
        ticker._thread.join(TIMEOUT)
        self.assertFalse(ticker._thread.is_alive())

    def test_thread_is_daemon(self):
        """A forgotten ticker must not keep the interpreter alive"""
        ticker = Ticker(10, lambda: None)
        ticker.start()
        try:
            self.assertTrue(ticker._thread.daemon)
            self.assertTrue(ticker.running)
        finally:
            ticker.cancel()

    def test_start_twice_is_noop(self):
        """Starting an already started ticker keeps the same thread"""
        ticker = Ticker(10, lambda: None)
        ticker.start()
        try:
            thread = ticker._thread
            ticker.start()
            self.assertIs(ticker._thread, thread)
        finally:
            ticker.cancel()

    @patch("llogger.ticker.error_console")
    def test_failing_callback_keeps_ticking(self, mock_error_console):
        """An exception is reported and the next tick still happens"""
        calls = []
        recovered = threading.Event()

        def callback():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            recovered.set()

        ticker = Ticker(0.01, callback, name="flaky")
        ticker.start()
        try:
            self.assertTrue(recovered.wait(TIMEOUT))
        finally:
            ticker.cancel()

        mock_error_console.print.assert_called()
        message = mock_error_console.print.call_args_list[0][0][0]
        self.assertIn("flaky", message)
        self.assertIn("boom", message)
