"""Logging configuration and helpers."""

import logging
import typing
from enum import StrEnum

from src import settings


class ConsoleFormat(StrEnum):
    """ANSI escape codes used by the colour formatter.

    <https://en.wikipedia.org/wiki/ANSI_escape_code#Select_Graphic_Rendition_parameters>
    """

    RESET = "\033[0m"

    BLACK = "\033[30m"
    RED = "\033[31m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    LIGHT_GREY = "\033[37m"

    HIGHLIGHT_RED = "\033[41m"

    BOLD = "\033[1m"


class DefaultConsoleFormatter(logging.Formatter):
    """The default console formatter to use."""

    fmt = "{asctime} - {name} - {levelname} - {message}"
    style = "{"
    validate = True

    def _formatted_message(self, *_: typing.Any, **__: typing.Any) -> str:
        return self.fmt

    def format(self, record: logging.LogRecord) -> str:
        """Format the specified log record as text."""
        formatter = logging.Formatter(
            self._formatted_message(record),
            style=self.style,  # type: ignore[arg-type]
            validate=self.validate,
        )
        return formatter.format(record)


class ColourConsoleFormatter(DefaultConsoleFormatter):
    """A formatter that colours each line by log level."""

    COLOURS = {
        logging.DEBUG: ConsoleFormat.LIGHT_GREY,
        logging.INFO: ConsoleFormat.BLUE,
        logging.WARNING: ConsoleFormat.YELLOW,
        logging.ERROR: ConsoleFormat.RED,
        logging.CRITICAL: ConsoleFormat.BOLD + ConsoleFormat.HIGHLIGHT_RED + ConsoleFormat.BLACK,
    }

    def _formatted_message(self, record: logging.LogRecord) -> str:
        log_colour = self.COLOURS.get(record.levelno, ConsoleFormat.RESET)
        return f"{log_colour}{self.fmt}{ConsoleFormat.RESET}"


def set_log_level(level: str | int) -> None:
    """Change the level of LOGGER and its console handler (e.g. from a CLI flag)."""
    LOGGER.setLevel(level)
    _stream_handler.setLevel(level)


_stream_handler = logging.StreamHandler()
_stream_handler.setLevel(settings.LOG_LEVEL)

if settings.LOG_COLOUR_ENABLED:  # pragma: nocover
    _stream_handler.setFormatter(ColourConsoleFormatter())
else:  # pragma: nocover
    _stream_handler.setFormatter(DefaultConsoleFormatter())


LOGGER = logging.getLogger(settings.LOGGER_NAME)
LOGGER.setLevel(settings.LOG_LEVEL)
LOGGER.addHandler(_stream_handler)
