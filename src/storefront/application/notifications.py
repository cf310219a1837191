"""Transient, user-facing notifications ("toasts").

Remote failures are caught at the call site closest to the user action
and turned into a notification instead of propagating, so the caller
can offer a retry on the same step.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    SUCCESS = "SUCCESS"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    title: str
    detail: str | None = None

    def __str__(self) -> str:
        if self.detail:
            return f"{self.title}: {self.detail}"
        return self.title


class Notifier(ABC):

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Deliver a notification to the user."""

    # --- Convenience ----------------------------------------------------------

    def success(self, title: str, detail: str | None = None) -> None:
        self.notify(Notification(NotificationLevel.SUCCESS, title, detail))

    def info(self, title: str, detail: str | None = None) -> None:
        self.notify(Notification(NotificationLevel.INFO, title, detail))

    def warning(self, title: str, detail: str | None = None) -> None:
        self.notify(Notification(NotificationLevel.WARNING, title, detail))

    def error(self, title: str, detail: str | None = None) -> None:
        self.notify(Notification(NotificationLevel.ERROR, title, detail))


_LOG_LEVELS = {
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


class LoggingNotifier(Notifier):
    """Fallback notifier when no UI is attached: writes to the log."""

    def notify(self, notification: Notification) -> None:
        logger.log(_LOG_LEVELS[notification.level], "%s", notification)
