"""
User-Facing Capabilities

The ledger engine never talks to a screen. It reports outcomes through a
Notifier and asks yes/no questions through a Confirmer. Whatever front end
hosts the ledger supplies real implementations; the defaults here log and
answer from a fixed policy.
"""

from abc import ABC, abstractmethod
from enum import Enum

import structlog


class Severity(str, Enum):
    """Notification severity tag."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notifier(ABC):
    """Shows a title + message to the user. Fire-and-forget."""

    @abstractmethod
    def notify(self, title: str, message: str, severity: Severity) -> None:
        pass


class Confirmer(ABC):
    """Asks the user a yes/no question."""

    @abstractmethod
    async def confirm(self, title: str, text: str) -> bool:
        """Return True if the user confirmed."""
        pass


class LoggingNotifier(Notifier):
    """Writes notifications to the structured log."""

    def __init__(self):
        self._logger = structlog.get_logger("shop_ledger.notifications")

    def notify(self, title: str, message: str, severity: Severity) -> None:
        if severity == Severity.ERROR:
            self._logger.error("notification", title=title, message=message)
        elif severity == Severity.WARNING:
            self._logger.warning("notification", title=title, message=message)
        else:
            self._logger.info(
                "notification",
                title=title,
                message=message,
                severity=severity.value,
            )


class StaticConfirmer(Confirmer):
    """Always gives the same answer. Useful for scripts and tests."""

    def __init__(self, answer: bool = False):
        self._answer = answer
        self.asked: list[tuple[str, str]] = []

    async def confirm(self, title: str, text: str) -> bool:
        self.asked.append((title, text))
        return self._answer
