"""
Bridge from the standard library `logging` module.

Libraries log through `logging`, and a StreamHandler writing to the same
terminal would print straight through an animating spinner. Installing
`MultiplexedHandler` on the root logger routes those records through
llogger instead, so they queue behind the current frame like any other
line.

This plays the same role as Rich's `RichHandler`: a `logging.Handler` whose
`emit` hands formatted records to a console-aware writer.
"""

import logging

from .logger import Logger
from .logger import logger as default_logger

# stdlib level number -> llogger level name; anything in between rounds down
LEVEL_MAP = (
    (logging.CRITICAL, "crit"),
    (logging.ERROR, "error"),
    (logging.WARNING, "warn"),
    (logging.INFO, "info"),
    (logging.DEBUG, "debug"),
)


def map_level(levelno: int) -> str:
    for threshold, name in LEVEL_MAP:
        if levelno >= threshold:
            return name
    return "wth"


class MultiplexedHandler(logging.Handler):
    """Send `logging` records through an llogger Logger."""

    def __init__(self, logger: Logger | None = None, level: int = logging.NOTSET):
        super().__init__(level)
        self.logger = logger or default_logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            self.logger.log(map_level(record.levelno), message)
        except Exception:
            self.handleError(record)


def install(level: int = logging.NOTSET, logger: Logger | None = None) -> MultiplexedHandler:
    """Attach a MultiplexedHandler to the root logger and return it."""
    handler = MultiplexedHandler(logger, level)
    logging.getLogger().addHandler(handler)
    return handler


def uninstall(handler: MultiplexedHandler) -> None:
    logging.getLogger().removeHandler(handler)
