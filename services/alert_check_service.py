"""
Service for the "send test alert" system check.

A test alert goes to every emergency contact through the same relay client
as real alerts and lands in the alert history, so a user can confirm their
contacts actually receive mail before an emergency happens.
"""
import logging
import sqlite3

from repositories import AlertRepository
from models.alert import AlertRecord, AlertStatus, TEST_ALERT_READING_ID
from services.alert_dispatcher import AlertDispatcher
from services.settings_service import SettingsService
from core.exceptions import DatabaseError, NoEmergencyContactsError

logger = logging.getLogger(__name__)


class AlertCheckService:
    """Sends system-check emails and records them in the alert history."""

    def __init__(
        self,
        settings_service: SettingsService,
        dispatcher: AlertDispatcher,
        alert_repository: AlertRepository
    ):
        self._settings_service = settings_service
        self._dispatcher = dispatcher
        self._alert_repo = alert_repository

    async def send_test_alert(self, user_id: int) -> AlertRecord:
        """
        Email a test alert to the user's emergency contacts.

        The email is sent even when emergency alerts are switched off. A relay
        failure is not an error here: it is recorded as a failed alert.

        Raises:
            UserNotFoundError: If the user does not exist.
            NoEmergencyContactsError: If the user has no emergency contacts.
            DatabaseError: If the history row could not be written.
        """
        user_settings = self._settings_service.get_user_settings(user_id)
        if not user_settings.emergency_contacts:
            raise NoEmergencyContactsError(user_id=user_id)

        request, delivery = await self._dispatcher.send_test_alert(user_settings)
        status = AlertStatus.SENT if delivery.ok else AlertStatus.FAILED

        try:
            record = self._alert_repo.record(
                user_id=user_id,
                reading_id=TEST_ALERT_READING_ID,
                request=request,
                status=status,
                reason=delivery.reason,
            )
        except sqlite3.Error as e:
            logger.error(f"Database error recording test alert: {e}", exc_info=True)
            raise DatabaseError(operation="send_test_alert") from e

        logger.info(
            "Test alert sent",
            extra={"user_id": user_id, "status": status.value, "recipients": len(request.to)}
        )
        return record
