"""Console logging set up for task runs."""

from __future__ import annotations

import enum
import logging
import os
import sys
from dataclasses import dataclass

LOGGER_NAME = "makeflow"
LOG_LEVEL_ENV_KEY = "CARGO_MAKE_LOG_LEVEL"

_RESET = "\x1b[0m"
_BOLD = "1"
_LEVEL_COLORS = {
    logging.DEBUG: "36",
    logging.INFO: "32",
    logging.WARNING: "33",
    logging.ERROR: "31",
}
_LEVEL_NAMES = {
    logging.DEBUG: "verbose",
    logging.WARNING: "warn",
    logging.ERROR: "error",
}


class LogLevel(enum.Enum):
    """The log levels a run can be configured with."""

    VERBOSE = "verbose"
    INFO = "info"
    ERROR = "error"

    @property
    def logging_level(self) -> int:
        return {
            LogLevel.VERBOSE: logging.DEBUG,
            LogLevel.INFO: logging.INFO,
            LogLevel.ERROR: logging.ERROR,
        }[self]


@dataclass
class LoggerOptions:
    """Options used to initialise the logger."""

    level: str = "info"
    color: bool = True


def _style(text: str, *codes: str) -> str:
    return f"\x1b[{';'.join(codes)}m{text}{_RESET}"


def get_level(level_name: str) -> LogLevel:
    """Map a level name to a LogLevel; unknown names mean INFO."""
    if level_name == "verbose":
        return LogLevel.VERBOSE
    if level_name == "error":
        return LogLevel.ERROR
    return LogLevel.INFO


def get_log_level() -> str:
    """Return the name of the level the logger currently lets through."""
    logger = logging.getLogger(LOGGER_NAME)
    if logger.isEnabledFor(logging.DEBUG):
        return "verbose"
    if logger.isEnabledFor(logging.INFO):
        return "info"
    return "error"


def get_name_for_level(level: int) -> str:
    """Return the display name of a logging level."""
    return _LEVEL_NAMES.get(level, "info")


def get_formatted_name(name: str, use_color: bool) -> str:
    """Return the program name, bold when colour is on."""
    return _style(name, _BOLD) if use_color else name


def get_formatted_log_level(level: int, use_color: bool) -> str:
    """Return the upper-case level name, coloured and bold when colour is on."""
    level_name = get_name_for_level(level).upper()
    if not use_color:
        return level_name
    color = _LEVEL_COLORS.get(level)
    if color is None:
        return _style(level_name, _BOLD)
    return _style(level_name, _BOLD, color)


class _Formatter(logging.Formatter):
    def __init__(self, color: bool) -> None:
        super().__init__()
        self._color = color

    def format(self, record: logging.LogRecord) -> str:
        name = get_formatted_name(LOGGER_NAME, self._color)
        level = get_formatted_log_level(record.levelno, self._color)
        return f"[{name}] {level} - {record.getMessage()}"


class _ConsoleHandler(logging.StreamHandler):
    """Writes records and ends the run on the first error."""

    def emit(self, record: logging.LogRecord) -> None:
        super().emit(record)
        if record.levelno >= logging.ERROR:
            super().emit(
                logging.makeLogRecord(
                    {
                        "name": record.name,
                        "levelno": logging.WARNING,
                        "levelname": "WARNING",
                        "msg": "Build Failed.",
                    }
                )
            )
            raise SystemExit(1)


def init(options: LoggerOptions) -> None:
    """Configure the package logger to write to standard output."""
    level = get_level(options.level)
    os.environ[LOG_LEVEL_ENV_KEY] = get_name_for_level(level.logging_level)

    logger = logging.getLogger(LOGGER_NAME)
    for handler in [h for h in logger.handlers if isinstance(h, _ConsoleHandler)]:
        logger.removeHandler(handler)

    handler = _ConsoleHandler(sys.stdout)
    handler.setFormatter(_Formatter(options.color))
    logger.addHandler(handler)
    logger.setLevel(level.logging_level)
    logger.propagate = False