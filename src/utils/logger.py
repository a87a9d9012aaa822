import logging
import os

from rich.console import Console
from rich.logging import RichHandler
from textual.logging import TextualHandler

_FORMAT = "[%(name)s]  %(message)s"

_loggers: dict[str, logging.Logger] = {}


class CenteredFormatter(logging.Formatter):
    longest_name_length = 14  # Initial default width

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )

        width = CenteredFormatter.longest_name_length
        record.name = record.name.center(width)
        return super().format(record)


def _log_level() -> int:
    if os.getenv("DEBUG"):
        return logging.DEBUG
    level = getattr(logging, os.getenv("STOREFRONT_LOG_LEVEL", "INFO").upper(), None)
    return level if isinstance(level, int) else logging.INFO


def _rich_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        log_time_format="[%X]",
    )
    handler.setFormatter(CenteredFormatter(_FORMAT))
    handler.setLevel(level)
    return handler


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.
    Output goes to stderr so it never mixes with the terminal UI.
    """
    if name is None:
        name = "storefront"
    logger = logging.getLogger(name)
    log_level = _log_level()
    logger.setLevel(log_level)

    if not logger.handlers:
        logger.addHandler(_rich_handler(log_level))
        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized with RichHandler.")

    _loggers[name] = logger
    return logger


def route_to_textual() -> None:
    """
    Swap every logger's handler for a TextualHandler while the app is running,
    so records show up in the textual devtools console instead of the screen.
    """
    for logger in _loggers.values():
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        handler = TextualHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)


def route_to_rich() -> None:
    for logger in _loggers.values():
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.addHandler(_rich_handler(logger.level))
