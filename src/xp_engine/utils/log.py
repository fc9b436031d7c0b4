# src/xp_engine/utils/log.py
"""Logging setup for the engine and its CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "xp_engine"

_console = Console(stderr=True)


def setup_logging(level: str = "WARNING", show_path: bool = False) -> logging.Logger:
    """Attach a rich console handler to the package logger.

    Module loggers are children of ``xp_engine`` so they all route through
    the handler configured here. Calling this again replaces the handler.
    """
    level_value = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level_value)
    logger.handlers.clear()

    handler = RichHandler(
        console=_console,
        level=level_value,
        show_path=show_path,
        rich_tracebacks=True,
        markup=False,
    )
    logger.addHandler(handler)
    logger.propagate = False
    return logger
