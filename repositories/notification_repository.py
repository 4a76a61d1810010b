"""
Repository backing the local notification sink.

Notifications are keyed by their deterministic id, so storing the same
notification twice leaves exactly one row.
"""
import logging
from typing import Any, Dict, List

from repositories.base import Database
from models.alert import LocalNotification
from core.datetime_utils import format_iso, utc_now

logger = logging.getLogger(__name__)


class NotificationRepository:
    """
    Repository for queued local notifications.

    It should be instantiated via core.dependencies.get_notification_repository().
    """

    def __init__(self, db: Database):
        self._db = db

    def upsert(self, user_id: int, notification: LocalNotification) -> bool:
        """
        Store a notification under its id.

        Returns:
            bool: True if a new row was created, False if an existing one was replaced.
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT 1 FROM notifications WHERE id = ?", (notification.id,))
            existed = cursor.fetchone() is not None
            cursor.execute(
                """
                INSERT INTO notifications (id, user_id, title, body, created_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title = excluded.title,
                    body = excluded.body
                """,
                (notification.id, user_id, notification.title, notification.body, format_iso(utc_now()))
            )
            conn.commit()
        finally:
            conn.close()

        return not existed

    def get_for_user(self, user_id: int) -> List[Dict[str, Any]]:
        """Get a user's notifications, newest first."""
        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                """
                SELECT id, title, body, created_at FROM notifications
                WHERE user_id = ? ORDER BY created_at DESC, rowid DESC
                """,
                (user_id,)
            ).fetchall()
        finally:
            conn.close()

        return [
            {"id": row[0], "title": row[1], "body": row[2], "created_at": row[3]}
            for row in rows
        ]
