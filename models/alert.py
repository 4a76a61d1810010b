"""
Payloads sent to the external collaborators and the alert history record.
"""
import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from core.datetime_utils import format_iso, from_db_string

NOTIFICATION_ID_PREFIX = "vital-alert-"

# Alert history rows for system-check emails carry this in place of a reading id
TEST_ALERT_READING_ID = "test-alert"


def notification_id_for(reading_id: str) -> str:
    """
    Deterministic local-notification id for a reading.

    Enqueueing twice for the same reading yields the same key, so the sink
    replaces rather than duplicates the user-visible alert.
    """
    return f"{NOTIFICATION_ID_PREFIX}{reading_id}"


@dataclass(frozen=True)
class EmailDeliveryRequest:
    """Body of ``POST /send-email`` on the email relay."""

    to: Tuple[str, ...]
    subject: str
    body: str

    def to_payload(self) -> Dict[str, Any]:
        return {"to": list(self.to), "subject": self.subject, "body": self.body}


@dataclass(frozen=True)
class LocalNotification:
    """A user-facing notification handed to the local notification sink."""

    id: str
    title: str
    body: str


class AlertStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"


@dataclass
class AlertRecord:
    """One attempted emergency email, kept for the alert history screen."""

    id: int
    user_id: int
    reading_id: str
    recipients: Tuple[str, ...]
    subject: str
    body: str
    status: AlertStatus
    reason: Optional[str]
    sent_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "reading_id": self.reading_id,
            "recipients": list(self.recipients),
            "subject": self.subject,
            "body": self.body,
            "status": self.status.value,
            "reason": self.reason,
            "sent_at": format_iso(self.sent_at),
        }

    @classmethod
    def from_row(cls, row: tuple) -> 'AlertRecord':
        """
        Create an AlertRecord from a database row tuple.

        Args:
            row: (id, user_id, reading_id, recipients, subject, body, status, reason, sent_at)
                where recipients is a JSON array.
        """
        recipients = tuple(json.loads(row[3]))
        return cls(
            id=row[0],
            user_id=row[1],
            reading_id=row[2],
            recipients=recipients,
            subject=row[4],
            body=row[5],
            status=AlertStatus(row[6]),
            reason=row[7],
            sent_at=from_db_string(row[8]),
        )
