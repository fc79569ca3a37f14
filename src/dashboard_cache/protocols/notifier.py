"""Notifier protocol.

Defines the interface for anything that can show a toast-style message
to the user: a log, an in-memory feed polled by the UI, a push channel.
"""

from typing import Protocol, runtime_checkable

from dashboard_cache.entities import Notification


@runtime_checkable
class Notifier(Protocol):
    """Protocol for user-visible notifications."""

    def notify(self, notification: Notification) -> None:
        """Show a notification.

        Args:
            notification: The message to show
        """
        ...


@runtime_checkable
class NotificationFeed(Notifier, Protocol):
    """A notifier that keeps what it sent so the UI can poll for it."""

    @property
    def notifications(self) -> list[Notification]:
        """Notifications in the order they were sent, oldest first."""
        ...
