"""Project logger for pairsignal."""

import logging

from rich.logging import RichHandler

LOGGER_NAME = "pairsignal"

logger = logging.getLogger(LOGGER_NAME)


def define_log_level(print_level: str = "INFO", name: str | None = None) -> logging.Logger:
    """Configure the project logger and return it.

    Safe to call more than once; the rich handler is installed only once.
    """
    level = logging.getLevelName(str(print_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    target = logging.getLogger(name or LOGGER_NAME)
    target.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in target.handlers):
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        target.addHandler(handler)
    target.propagate = False
    return target
