"""
User-facing notifications.

The core decides what to say and how severe it is; the UI collaborator decides
how to render it. A notifier is any callable taking a Notification.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from storecart.logging import get_logger

logger = get_logger(__name__)


class Severity(str, Enum):
    """Notification severity."""
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Notification:
    message: str
    severity: Severity = Severity.SUCCESS

    def to_dict(self) -> dict:
        return {"message": self.message, "severity": self.severity.value}


Notifier = Callable[[Notification], None]

_LOG_LEVELS = {
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


def log_notifier(notification: Notification) -> None:
    """Default notifier: write the notification to the log."""
    logger.log(_LOG_LEVELS[notification.severity], f"[{notification.severity.value}] {notification.message}")


class NotificationBuffer:
    """
    Notifier that keeps the most recent notifications.

    The HTTP layer drains it after each request so the page can show them.
    """

    def __init__(self, forward: Notifier | None = log_notifier, limit: int = 20) -> None:
        self._forward = forward
        self._limit = limit
        self._pending: list[Notification] = []

    def __call__(self, notification: Notification) -> None:
        self._pending.append(notification)
        del self._pending[:-self._limit]
        if self._forward is not None:
            self._forward(notification)

    def drain(self) -> list[Notification]:
        pending, self._pending = self._pending, []
        return pending
