"""Logging setup for the CLI."""
import logging

from rich.logging import RichHandler

PACKAGE_LOGGER = "yks_tracker"


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a rich handler to the package logger. Safe to call twice."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level.upper())
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(show_path=False, markup=False))
    logger.propagate = False
    return logger
