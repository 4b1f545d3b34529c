"""Logging setup for draftwise."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from draftwise.ui.console import get_err_console

APP_LOGGER = "draftwise"

logging.getLogger(APP_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``draftwise`` hierarchy."""
    if name == APP_LOGGER or name.startswith(f"{APP_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(APP_LOGGER).getChild(name)


def configure_logging(level: str | int = logging.WARNING) -> logging.Logger:
    logger = logging.getLogger(APP_LOGGER)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.WARNING
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=get_err_console(),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setLevel(level)
    logger.addHandler(handler)
    return logger
