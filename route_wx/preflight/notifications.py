"""Notification delivery for preflight weather changes."""

import logging
from abc import ABC, abstractmethod
from typing import List, Tuple

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """
    Fire-and-forget delivery of a (title, body) message.

    Implementations may raise; the monitor logs failures and carries on.
    """

    @abstractmethod
    def send(self, title: str, body: str) -> None:
        pass


class LoggingNotifier(Notifier):
    """Writes notifications to the log."""

    def __init__(self, level: int = logging.WARNING):
        self.level = level

    def send(self, title: str, body: str) -> None:
        logger.log(self.level, "%s: %s", title, body)


class RecordingNotifier(Notifier):
    """Keeps sent messages in memory, for consumers that display them later."""

    def __init__(self):
        self.sent: List[Tuple[str, str]] = []

    def send(self, title: str, body: str) -> None:
        self.sent.append((title, body))
