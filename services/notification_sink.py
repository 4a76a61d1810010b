"""
Local notification sinks.

A sink receives user-facing notifications from the alert dispatcher. When a
notification actually fires is the sink's business. Every sink must treat
the notification id as an idempotency key: enqueueing the same id twice
leaves one notification, not two.
"""
import logging
import sqlite3
from abc import ABC, abstractmethod
from typing import Dict, List

from core.exceptions import NotificationSinkError
from models.alert import LocalNotification
from repositories.notification_repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationSink(ABC):
    """Destination for local user-facing notifications."""

    @abstractmethod
    async def enqueue(self, notification: LocalNotification, *, user_id: int) -> None:
        """
        Queue a notification for a user.

        Raises:
            NotificationSinkError (or any exception): if the notification was not queued
        """


class InMemoryNotificationSink(NotificationSink):
    """Keeps notifications in a dict keyed by id. Useful for tests and local runs."""

    def __init__(self):
        self._pending: Dict[str, LocalNotification] = {}
        self.enqueue_calls = 0

    async def enqueue(self, notification: LocalNotification, *, user_id: int) -> None:
        self.enqueue_calls += 1
        self._pending[notification.id] = notification

    @property
    def notifications(self) -> List[LocalNotification]:
        return list(self._pending.values())


class RepositoryNotificationSink(NotificationSink):
    """Stores notifications in SQLite for clients to pick up."""

    def __init__(self, notification_repository: NotificationRepository):
        self._repo = notification_repository

    async def enqueue(self, notification: LocalNotification, *, user_id: int) -> None:
        """
        Raises:
            NotificationSinkError: If the notification could not be stored
        """
        try:
            created = self._repo.upsert(user_id, notification)
        except sqlite3.Error as e:
            logger.error(f"Database error queueing notification: {e}", exc_info=True)
            raise NotificationSinkError(
                detail=f"Could not store notification {notification.id}",
                notification_id=notification.id
            ) from e

        logger.info(
            "Local notification queued" if created else "Local notification replaced",
            extra={"notification_id": notification.id, "user_id": user_id}
        )
