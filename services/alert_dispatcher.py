"""
Alert dispatch for out-of-range vital readings.

Architecture:
    VitalsService → AlertDispatcher → EmailRelayClient (HTTP)
                                    → NotificationSink (local)

One dispatch() call makes at most one email attempt and at most one
notification enqueue, in that order. The notification step runs whatever
happened to the email. When the user has switched emergency emails off, the
email step is skipped and only the notification is made. Nothing here is
retried, and no failure is raised through the caller: every path ends in a
DispatchOutcome.

The dispatcher holds no per-user state. Everything it needs about the user
arrives in the UserSettings snapshot, so concurrent dispatches for different
readings never share mutable data.
"""
import logging
from typing import Optional, Tuple

from clients.email_relay_client import EmailRelayClient
from core.datetime_utils import format_reading_date, format_reading_time
from core.exceptions import EmailSerializationError, ExternalServiceError
from models.alert import EmailDeliveryRequest, LocalNotification, notification_id_for
from models.measurement import Measurement
from models.outcome import (
    DeliveryResult,
    DeliveryStatus,
    DispatchOutcome,
    NotificationResult,
    NotificationStatus,
    SkipReason,
)
from models.settings import UserSettings
from models.verdict import OutOfRange, Verdict
from services.notification_sink import NotificationSink
from services.signals import NoContactsSignal

logger = logging.getLogger(__name__)


class AlertDispatcher:
    """
    Sends the emergency email and the local notification for an out-of-range reading.

    Dependencies are injected via core.dependencies.get_alert_dispatcher().
    """

    def __init__(
        self,
        email_client: Optional[EmailRelayClient],
        notification_sink: NotificationSink,
        app_name: str,
        no_contacts_signal: Optional[NoContactsSignal] = None
    ):
        """
        Args:
            email_client: Client for the email relay, or None when no relay is
                configured (every delivery is then reported as failed).
            notification_sink: Destination for local notifications.
            app_name: Application name used in the subject and signature.
            no_contacts_signal: Signal emitted when there is nobody to email.
        """
        self._email_client = email_client
        self._sink = notification_sink
        self._app_name = app_name
        self.no_contacts_signal = no_contacts_signal or NoContactsSignal()

    # =========================================================================
    # PAYLOADS
    # =========================================================================

    def build_email(
        self,
        measurement: Measurement,
        verdict: OutOfRange,
        user_settings: UserSettings
    ) -> EmailDeliveryRequest:
        """Build the emergency email sent to every contact."""
        name = user_settings.display_name
        label = measurement.type_label
        body = (
            "Dear Emergency Contact,\n"
            "\n"
            f"{name} has logged a {label.lower()} reading outside their normal range.\n"
            "\n"
            "Reading Details:\n"
            f"- Type: {label}\n"
            f"- Value: {verdict.formatted_value}\n"
            f"- Time: {format_reading_time(measurement.reading_time)}\n"
            f"- Date: {format_reading_date(measurement.reading_date)}\n"
            "\n"
            f"Please check in with {name} as soon as possible.\n"
            "\n"
            f"This alert was generated automatically by {self._app_name}."
        )
        return EmailDeliveryRequest(
            to=tuple(user_settings.emergency_contacts),
            subject=f"{self._app_name} Out-of-Range Vital Reading for {name}",
            body=body,
        )

    def build_test_email(self, user_settings: UserSettings) -> EmailDeliveryRequest:
        """Build the system-check email a user can send to their contacts."""
        return EmailDeliveryRequest(
            to=tuple(user_settings.emergency_contacts),
            subject=f"{self._app_name} Test Alert: System Check",
            body=(
                "Dear Emergency Contact,\n"
                "\n"
                f"This is a test alert from {user_settings.display_name} to verify "
                "the email system is working properly. No action is needed.\n"
                "\n"
                f"This alert was generated by {self._app_name}."
            ),
        )

    def build_notification(self, measurement: Measurement, verdict: OutOfRange) -> LocalNotification:
        """Build the user-facing notification for a reading."""
        return LocalNotification(
            id=notification_id_for(measurement.id),
            title=f"{measurement.type_label} Out of Range",
            body=(
                f"Your reading of {verdict.formatted_value} at "
                f"{format_reading_time(measurement.reading_time)} is outside your normal range."
            ),
        )

    # =========================================================================
    # DISPATCH
    # =========================================================================

    async def dispatch(
        self,
        measurement: Measurement,
        verdict: Verdict,
        user_settings: UserSettings
    ) -> DispatchOutcome:
        """
        Alert on a reading according to its verdict.

        Returns:
            DispatchOutcome: SKIPPED for in-range readings, CONTACTS_MISSING when the
            user has no emergency contacts, otherwise DONE with both step results
            (delivery DISABLED when the user switched emergency emails off).
        """
        if not isinstance(verdict, OutOfRange):
            return DispatchOutcome.skipped(SkipReason.IN_RANGE)

        log_extra = {"reading_id": measurement.id, "user_id": user_settings.user_id}

        if not user_settings.emergency_alerts_enabled:
            logger.info("Emergency alerts are off for user, notifying only", extra=log_extra)
            notification = self.build_notification(measurement, verdict)
            notified = await self._notify(notification, user_settings.user_id, log_extra)
            return DispatchOutcome.done(
                request=None,
                delivery=DeliveryResult(DeliveryStatus.DISABLED, reason="emergency alerts are turned off"),
                notification=notified,
            )

        if not user_settings.emergency_contacts:
            logger.warning("Out-of-range reading with no emergency contacts", extra=log_extra)
            self.no_contacts_signal.emit(user_settings.user_id)
            return DispatchOutcome.skipped(SkipReason.NO_CONTACTS)

        request = self.build_email(measurement, verdict, user_settings)
        delivery = await self._deliver(request, log_extra)

        notification = self.build_notification(measurement, verdict)
        notified = await self._notify(notification, user_settings.user_id, log_extra)

        logger.info(
            "Alert dispatch finished",
            extra={
                **log_extra,
                "delivery": delivery.status.value,
                "notification": notified.status.value,
            }
        )
        return DispatchOutcome.done(request=request, delivery=delivery, notification=notified)

    async def send_test_alert(self, user_settings: UserSettings) -> Tuple[EmailDeliveryRequest, DeliveryResult]:
        """
        Send the system-check email to every emergency contact.

        Goes out even when emergency alerts are off. Callers make sure there
        is at least one contact.
        """
        request = self.build_test_email(user_settings)
        delivery = await self._deliver(request, {"user_id": user_settings.user_id, "test_alert": True})
        return request, delivery

    async def _deliver(self, request: EmailDeliveryRequest, log_extra: dict) -> DeliveryResult:
        if self._email_client is None:
            logger.warning("Email relay not configured, alert email not sent", extra=log_extra)
            return DeliveryResult(DeliveryStatus.FAILED, reason="email relay not configured")

        try:
            await self._email_client.send_email(request)
        except EmailSerializationError as e:
            logger.error("Alert email could not be serialized", extra={**log_extra, "error": e.detail})
            return DeliveryResult(DeliveryStatus.SERIALIZATION_FAILED, reason=e.detail)
        except ExternalServiceError as e:
            logger.error("Alert email delivery failed", extra={**log_extra, "error": e.detail})
            return DeliveryResult(DeliveryStatus.FAILED, reason=e.detail)
        except Exception as e:
            logger.exception("Unexpected error delivering alert email", extra=log_extra)
            return DeliveryResult(DeliveryStatus.FAILED, reason=str(e) or type(e).__name__)

        logger.info("Alert email delivered", extra={**log_extra, "recipients": len(request.to)})
        return DeliveryResult(DeliveryStatus.SENT)

    async def _notify(
        self,
        notification: LocalNotification,
        user_id: int,
        log_extra: dict
    ) -> NotificationResult:
        try:
            await self._sink.enqueue(notification, user_id=user_id)
        except Exception as e:
            logger.exception(
                "Local notification enqueue failed",
                extra={**log_extra, "notification_id": notification.id}
            )
            reason = getattr(e, "detail", None) or str(e) or type(e).__name__
            return NotificationResult(NotificationStatus.FAILED, notification.id, reason=reason)

        return NotificationResult(NotificationStatus.ENQUEUED, notification.id)
