"""llogger - leveled terminal logger with concurrent in-place spinners"""

from .buffer import FrameBuffer
from .config import (
    CONFIG_FILE,
    DEFAULT_CONFIG,
    HEARTBEAT_INTERVAL,
    REFRESH_INTERVAL,
    get_bool_setting,
    get_float_setting,
    get_int_setting,
    get_setting,
    is_enabled,
    load_config,
    save_config,
)
from .console import console, error_console
from .handler import MultiplexedHandler, install, uninstall
from .height import content_height
from .logger import LEVELS, LimitedLogger, Logger, begin_indicator, logger
from .multiplexer import MultiplexerState, TerminalMultiplexer, get_multiplexer, set_multiplexer
from .progress import IndicatorKind, ProgressHandle, ProgressState, SpinnerOptions
from .terminal import TerminalWriter
from .ticker import Ticker

__all__ = [
    # Config
    "CONFIG_FILE",
    "DEFAULT_CONFIG",
    "HEARTBEAT_INTERVAL",
    "REFRESH_INTERVAL",
    "get_bool_setting",
    "get_float_setting",
    "get_int_setting",
    "get_setting",
    "is_enabled",
    "load_config",
    "save_config",
    # Console
    "console",
    "error_console",
    # Logging
    "LEVELS",
    "LimitedLogger",
    "Logger",
    "begin_indicator",
    "logger",
    "MultiplexedHandler",
    "install",
    "uninstall",
    # Spinners
    "IndicatorKind",
    "ProgressHandle",
    "ProgressState",
    "SpinnerOptions",
    # Terminal
    "FrameBuffer",
    "MultiplexerState",
    "TerminalMultiplexer",
    "TerminalWriter",
    "Ticker",
    "content_height",
    "get_multiplexer",
    "set_multiplexer",
]
