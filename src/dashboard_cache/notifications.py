"""Notifier implementations.

Only the cache invalidation mutation notifies the user; every other
failure is shown inline by the view that owns the query.
"""

import logging
from collections import deque

from dashboard_cache.entities import Notification

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """Writes notifications to the log."""

    def notify(self, notification: Notification) -> None:
        level = logging.WARNING if notification.is_destructive else logging.INFO
        logger.log(level, "%s: %s", notification.title, notification.description)


class InMemoryNotifier(LoggingNotifier):
    """Logs notifications and keeps the most recent ones for polling."""

    def __init__(self, max_items: int = 50) -> None:
        self._items: deque[Notification] = deque(maxlen=max_items)

    def notify(self, notification: Notification) -> None:
        super().notify(notification)
        self._items.append(notification)

    @property
    def notifications(self) -> list[Notification]:
        """Notifications in the order they were sent, oldest first."""
        return list(self._items)

    @property
    def last(self) -> Notification | None:
        return self._items[-1] if self._items else None

    def clear(self) -> None:
        self._items.clear()
