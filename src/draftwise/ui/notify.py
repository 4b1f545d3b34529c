"""User-facing notification channels."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from draftwise.logs import get_logger
from draftwise.ui.render import render_error, render_info, render_success, render_warning

logger = get_logger(__name__)


@runtime_checkable
class Notifier(Protocol):
    def success(self, message: str) -> None:
        """Report a completed action."""

    def info(self, message: str) -> None:
        """Report neutral progress."""

    def warning(self, message: str) -> None:
        """Report a problem that did not stop the session."""

    def error(self, message: str) -> None:
        """Report a failed operation."""


class LogNotifier:
    def success(self, message: str) -> None:
        logger.info(message)

    def info(self, message: str) -> None:
        logger.info(message)

    def warning(self, message: str) -> None:
        logger.warning(message)

    def error(self, message: str) -> None:
        logger.error(message)


class ConsoleNotifier:
    def success(self, message: str) -> None:
        render_success(message)

    def info(self, message: str) -> None:
        render_info(message)

    def warning(self, message: str) -> None:
        render_warning(message)

    def error(self, message: str) -> None:
        render_error(message)


class TextualNotifier:
    """Forward notifications to a Textual app as toasts."""

    def __init__(self, app: Any, *, timeout: float = 4.0) -> None:
        self._app = app
        self._timeout = timeout

    def success(self, message: str) -> None:
        self._app.notify(message, title="Done", severity="information", timeout=self._timeout)

    def info(self, message: str) -> None:
        self._app.notify(message, severity="information", timeout=self._timeout)

    def warning(self, message: str) -> None:
        self._app.notify(message, title="Warning", severity="warning", timeout=self._timeout)

    def error(self, message: str) -> None:
        self._app.notify(message, title="Error", severity="error", timeout=self._timeout)
