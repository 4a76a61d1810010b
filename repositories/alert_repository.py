"""
Repository for the emergency email alert history.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from repositories.base import Database
from models.alert import AlertRecord, AlertStatus, EmailDeliveryRequest
from core.datetime_utils import format_iso, utc_now

logger = logging.getLogger(__name__)


class AlertRepository:
    """
    Repository for alert history records.

    It should be instantiated via core.dependencies.get_alert_repository().
    """

    def __init__(self, db: Database):
        self._db = db

    def record(
        self,
        user_id: int,
        reading_id: str,
        request: EmailDeliveryRequest,
        status: AlertStatus,
        reason: Optional[str] = None
    ) -> AlertRecord:
        """Store one delivery attempt and return it."""
        conn = self._db.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute(
                """
                INSERT INTO alerts
                (user_id, reading_id, recipients, subject, body, status, reason, sent_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    reading_id,
                    json.dumps(list(request.to)),
                    request.subject,
                    request.body,
                    status.value,
                    reason,
                    format_iso(utc_now()),
                )
            )
            alert_id = cursor.lastrowid
            cursor.execute(
                """
                SELECT id, user_id, reading_id, recipients, subject, body, status, reason, sent_at
                FROM alerts WHERE id = ?
                """,
                (alert_id,)
            )
            row = cursor.fetchone()
            conn.commit()
            return AlertRecord.from_row(row)
        finally:
            conn.close()

    def get_for_user(self, user_id: int, limit: Optional[int] = None) -> List[AlertRecord]:
        """Get a user's alert history, newest first."""
        query = """
            SELECT id, user_id, reading_id, recipients, subject, body, status, reason, sent_at
            FROM alerts WHERE user_id = ?
            ORDER BY sent_at DESC, id DESC
        """
        params: list = [user_id]
        if limit:
            query += " LIMIT ?"
            params.append(limit)

        conn = self._db.get_connection()
        try:
            rows = conn.execute(query, params).fetchall()
        finally:
            conn.close()

        return [AlertRecord.from_row(row) for row in rows]

    def count_by_status(self, user_id: int) -> Dict[str, Any]:
        """Count a user's alerts per status, e.g. {"sent": 3, "failed": 1}."""
        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                "SELECT status, COUNT(*) FROM alerts WHERE user_id = ? GROUP BY status",
                (user_id,)
            ).fetchall()
        finally:
            conn.close()

        counts = {status.value: 0 for status in AlertStatus}
        for status, count in rows:
            counts[status] = count
        return counts
