"""
Tests for the leveled logger (llogger/logger.py).

Most tests use the uncoloured `log` fixture from conftest, whose prefixes
are plain "[INFO]", "[WARNING]" and so on, with an idle multiplexer so every
line is written straight through to the recording writer.
"""

import os
import re
import unittest
from unittest.mock import patch

import pytest

from llogger.colors import colorize
from llogger.logger import (
    LABEL_WIDTH,
    LEVELS,
    LimitedLogger,
    Logger,
    begin_indicator,
    format_args,
    padded_label,
)
from llogger.progress import ProgressState


class TestLevels(unittest.TestCase):
    """Test the level table and label padding"""

    def test_all_levels_present(self):
        """Test that every level from most to least severe is defined"""
        self.assertEqual(
            list(LEVELS),
            ["emerg", "alert", "crit", "error", "warn", "notice", "info", "verb", "debug", "wth"],
        )

    def test_label_width_is_longest_label(self):
        self.assertEqual(LABEL_WIDTH, len("WHO CARES?"))

    def test_padded_label_centres(self):
        """Test that odd padding goes to the left"""
        self.assertEqual(padded_label("INFO"), "   INFO   ")
        self.assertEqual(padded_label("ERROR"), "   ERROR  ")
        self.assertEqual(padded_label("WHO CARES?"), "WHO CARES?")

    def test_format_args(self):
        """Test that strings are kept and other values are pretty printed"""
        self.assertEqual(format_args(["a", {"k": 1}, 3]), "a {'k': 1} 3")
        self.assertEqual(format_args([]), "")


class TestPrefix:
    def test_plain(self, log):
        assert log.get_prefix("info") == "[INFO]"
        assert log.get_prefix("warn") == "[WARNING]"

    def test_padded(self, mux):
        padded = Logger(color=False, pad=True, multiplexer=mux)
        assert padded.get_prefix("info") == "[   INFO   ]"
        assert padded.get_prefix("error") == "[   ERROR  ]"

    def test_scope(self, mux):
        scoped = Logger("db", color=False, pad=False, multiplexer=mux)
        assert scoped.get_prefix("info") == "[INFO <db>]"

    def test_colored_badge(self, mux):
        colored = Logger(color=True, pad=False, multiplexer=mux)
        prefix = colored.get_prefix("error")
        assert prefix == colorize(" ERROR ", LEVELS["error"].style)
        assert prefix.startswith("\x1b[")


class TestLogging:
    def test_line_is_written(self, log, writer):
        log.info("hello")
        assert writer.writes == ["[INFO] hello\n"]

    def test_every_level_method(self, log, writer):
        for level in LEVELS:
            getattr(log, level)("x")
        assert writer.writes == [f"[{info.label}] x\n" for info in LEVELS.values()]

    def test_args_are_joined(self, log, writer):
        log.info("a", {"k": 1}, 3)
        assert writer.writes == ["[INFO] a {'k': 1} 3\n"]

    def test_date_prefix(self, mux, writer):
        dated = Logger(color=False, pad=False, date=True, duration=False, multiplexer=mux)
        dated.info("hi")
        assert re.fullmatch(
            r"\[INFO\] \[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}\] hi\n", writer.writes[0]
        )

    @patch("llogger.logger.time.monotonic", side_effect=[100.0, 101.25])
    def test_duration_since_previous_line(self, mock_monotonic, mux, writer):
        timed = Logger(color=False, pad=False, date=False, duration=True, multiplexer=mux)
        timed.info("one")
        timed.info("two")
        assert writer.writes == ["[INFO] [+0.000s] one\n", "[INFO] [+1.250s] two\n"]

    @patch("llogger.logger.error_console")
    def test_unknown_level_is_reported_not_raised(self, mock_error_console, log, writer):
        log.log("loud", "x")
        assert writer.writes == []
        mock_error_console.print.assert_called_once()
        assert "loud" in mock_error_console.print.call_args[0][0]

    def test_disabled_logger_is_silent(self, mux, writer):
        quiet = Logger(enabled=False, multiplexer=mux)
        quiet.error("nothing")
        assert writer.writes == []

    def test_global_kill_switch(self, log, writer):
        with patch.dict(os.environ, {"LLOGGER_ENABLED": "false"}):
            log.info("hidden")
            assert not log.is_enabled
        log.info("shown")
        assert writer.writes == ["[INFO] shown\n"]

    def test_emit_skips_formatting(self, log, writer):
        log.emit("already formatted")
        assert writer.writes == ["already formatted\n"]


class TestStack:
    def test_caller_is_named(self, mux, writer):
        traced = Logger(color=False, pad=False, date=False, duration=False, stack=True, multiplexer=mux)
        traced.info("here")
        assert re.fullmatch(
            r"\[INFO\] \(test_caller_is_named @ test_logger\.py:\d+\) here\n", writer.writes[0]
        )

    def test_limited_logger_names_the_real_caller(self, mux, writer):
        traced = Logger(color=False, pad=False, date=False, duration=False, stack=True, multiplexer=mux)
        traced.limit(1).warn("once")
        assert re.fullmatch(
            r"\[WARNING\] \(test_limited_logger_names_the_real_caller @ test_logger\.py:\d+\) once\n",
            writer.writes[0],
        )

    def test_off_by_default_in_fixture(self, log, writer):
        log.info("plain")
        assert writer.writes == ["[INFO] plain\n"]


class TestExclusive:
    def test_other_loggers_are_silenced(self, log, mux, writer):
        only = Logger("only", color=False, pad=False, date=False, duration=False, multiplexer=mux)
        only.exclusive = True
        try:
            log.info("muted")
            only.info("heard")
            assert only.exclusive and not log.exclusive
            assert not log.is_enabled
        finally:
            only.exclusive = False

        log.info("back")
        assert writer.writes == ["[INFO <only>] heard\n", "[INFO] back\n"]

    def test_spinners_of_other_loggers_never_start(self, log, mux):
        only = Logger(color=False, multiplexer=mux)
        only.exclusive = True
        try:
            spinner = log.info.spin("muted", running_icon="a")
        finally:
            only.exclusive = False
        assert spinner.state is ProgressState.PENDING
        assert not mux.active

    def test_only_the_owner_can_clear_it(self, log, mux):
        only = Logger(color=False, multiplexer=mux)
        only.exclusive = True
        try:
            log.exclusive = False
            assert only.exclusive
        finally:
            only.exclusive = False
        assert not only.exclusive


class TestLimit:
    def test_limit_per_call_site(self, log, writer):
        for _ in range(5):
            log.limit(2).warn("repeated")
        assert writer.writes == ["[WARNING] repeated\n"] * 2

    def test_different_call_sites_count_separately(self, log, writer):
        log.once().info("first site")
        log.once().info("second site")
        assert len(writer.writes) == 2

    def test_once_with_key(self, log, writer):
        log.once("startup").info("a")
        log.once("startup").info("b")
        assert writer.writes == ["[INFO] a\n"]

    def test_lookup_by_key(self, log):
        limited = log.limit(3, "retries")
        assert log.limit("retries") is limited
        assert isinstance(limited, LimitedLogger)

    def test_lookup_unknown_key_raises(self, log):
        with pytest.raises(KeyError):
            log.limit("missing")

    def test_exhausted(self, log):
        limited = log.limit(1, "one")
        assert not limited.exhausted
        limited.info("x")
        assert limited.exhausted

    def test_prefix_matches_wrapped_logger(self, log):
        assert log.limit(1, "p").get_prefix("info") == log.get_prefix("info")

    def test_exhausted_spin_is_inert(self, log, mux):
        limited = log.limit(1, "spins")
        first = limited.info.spin("first", running_icon="a")
        second = limited.info.spin("second", running_icon="a")

        assert first.state is ProgressState.RUNNING
        assert second.state is ProgressState.PENDING
        assert list(mux.live_handles) == [first]

        second.success()
        assert second.state is ProgressState.PENDING


class TestBeginIndicator(unittest.TestCase):
    """Test the module-level spinner helper"""

    @patch("llogger.logger.logger")
    def test_uses_default_logger(self, mock_logger):
        """Test that begin_indicator starts a spinner on the default logger"""
        begin_indicator("Deploying", level="warn", prefix=False)
        mock_logger.spin.assert_called_once_with("warn", "Deploying", prefix=False)

    @patch("llogger.logger.logger")
    def test_default_level_is_info(self, mock_logger):
        begin_indicator("Deploying")
        mock_logger.spin.assert_called_once_with("info", "Deploying")
