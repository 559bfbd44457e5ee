"""Rich console logging for the notes validator package.

All modules log through children of the ``notes_validator`` logger, which owns
the single RichHandler. ``NOTES_LOG_LEVEL`` sets its initial level.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "notes_validator"
DEFAULT_LEVEL = "INFO"


def setup_logger(name: str = ROOT_LOGGER_NAME, level: str | None = None) -> logging.Logger:
    """Attach a stderr RichHandler to *name* unless it already has handlers."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel((level or os.getenv("NOTES_LOG_LEVEL") or DEFAULT_LEVEL).upper())
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger ``notes_validator.<name>``; the package handler is installed on first use."""
    setup_logger()
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
