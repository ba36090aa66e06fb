"""Logging setup and utilities."""

import logging
import os
import sys
from typing import TextIO

from .debug import is_debug, set_debug

__all__ = [
    "LogObjects",
    "get_logger",
    "init_logger",
]

_ESC = "\x1b["
_RESET = f"{_ESC}0m"

# (prefix codes) per level, DEBUG and INFO are left plain
_LEVEL_STYLES = {
    logging.WARNING: "33;2",
    logging.ERROR: "31;2",
    logging.CRITICAL: "31;1",
}


class LogObjects:
    """Reusable objects for loggers."""

    handlers: list[logging.Handler] = []


def should_colorize(stream: TextIO | None = None) -> bool:
    """Tell if ANSI colors should be used for the given stream.

    NO_COLOR disables colors, FORCE_COLOR forces them, otherwise colors are
    only used on a TTY.

    Args:
        stream: The output stream to check. Defaults to sys.stderr.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    if stream is None:
        stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


class ScreenLogFormatter(logging.Formatter):
    """A formatter adding colors based on log level."""

    def __init__(self, use_colors: bool | None = None) -> None:
        super().__init__()
        log_format = r"%(name)20s - %(message)s // %(filename)s:%(lineno)d" if is_debug() else r"%(message)s"
        if use_colors is None:
            use_colors = should_colorize()
        self._default = logging.Formatter(log_format)
        self._formatters = {
            level: logging.Formatter(f"{_ESC}{codes}m{log_format}{_RESET}" if use_colors else log_format)
            for level, codes in _LEVEL_STYLES.items()
        }

    def format(self, record: logging.LogRecord) -> str:
        return self._formatters.get(record.levelno, self._default).format(record)


def init_logger(filename: str | None = None, force_debug: bool = False) -> None:
    """Initialize the logging system.

    Args:
        filename: Optional filename to log to
        force_debug: If True, force debug level
    """
    if force_debug:
        set_debug(True)

    LogObjects.handlers.clear()
    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(fmt=r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"))
        LogObjects.handlers.append(file_handler)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(ScreenLogFormatter())
    LogObjects.handlers.append(stream_handler)
    # module loggers (logging.getLogger(__name__)) propagate to this one
    get_logger("spicewall")


def get_logger(name: str = "spicewall", level: int | None = None) -> logging.Logger:
    """Return a named logger.

    Args:
        name: logger's name, prefixed with "spicewall." unless it already is
        level: logger's level (auto if not set)

    Returns:
        The logger instance
    """
    if name != "spicewall" and not name.startswith("spicewall."):
        name = f"spicewall.{name}"
    logger = logging.getLogger(name)
    if level is None:
        logger.setLevel(logging.DEBUG if is_debug() else logging.WARNING)
    else:
        logger.setLevel(level)
    logger.propagate = False
    logger.handlers[:] = LogObjects.handlers
    logger.debug('Logger "%s" initialized', name)
    return logger
