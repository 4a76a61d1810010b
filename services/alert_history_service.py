"""
Service layer for alert history and queued notifications.
"""
import logging
from typing import Any, Dict, List, Optional

from repositories import AlertRepository, NotificationRepository, UserRepository
from models.alert import AlertRecord, AlertStatus
from core.exceptions import UserNotFoundError

logger = logging.getLogger(__name__)


class AlertHistoryService:
    """Read-side access to what the alert dispatcher has done for a user."""

    def __init__(
        self,
        user_repository: UserRepository,
        alert_repository: AlertRepository,
        notification_repository: NotificationRepository
    ):
        self._user_repo = user_repository
        self._alert_repo = alert_repository
        self._notification_repo = notification_repository

    def _require_user(self, user_id: int) -> None:
        if self._user_repo.get_by_id(user_id) is None:
            raise UserNotFoundError(user_id=user_id)

    def get_alerts(self, user_id: int, limit: Optional[int] = None) -> List[AlertRecord]:
        self._require_user(user_id)
        return self._alert_repo.get_for_user(user_id, limit=limit)

    def get_stats(self, user_id: int) -> Dict[str, Any]:
        """
        Alert counts and delivery rate.

        The delivery rate is the percentage of attempted alerts that were sent,
        rounded to a whole number; 0 when nothing has been attempted.
        """
        self._require_user(user_id)
        counts = self._alert_repo.count_by_status(user_id)
        sent = counts[AlertStatus.SENT.value]
        failed = counts[AlertStatus.FAILED.value]
        total = sent + failed

        return {
            "total": total,
            "sent": sent,
            "failed": failed,
            "delivery_rate": round(sent / total * 100) if total else 0,
        }

    def get_notifications(self, user_id: int) -> List[Dict[str, Any]]:
        self._require_user(user_id)
        return self._notification_repo.get_for_user(user_id)
