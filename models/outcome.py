"""
Structured result of one AlertDispatcher.dispatch() call.

Dispatch walks a small state machine:

    Start ──InRange──────────────────────────────▶ SKIPPED
      │
      └─OutOfRange─▶ Evaluating ──no contacts───▶ CONTACTS_MISSING
                         │
                         ├──alerts off──▶ Notifying ──▶ DONE (delivery DISABLED)
                         │
                         └──▶ Delivering ──▶ Notifying ──▶ DONE

Notifying runs whatever the delivery result was. Failures are values here,
never exceptions raised through the caller.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from models.alert import EmailDeliveryRequest


class DispatchState(str, Enum):
    SKIPPED = "skipped"
    CONTACTS_MISSING = "contacts_missing"
    DONE = "done"


class SkipReason(str, Enum):
    IN_RANGE = "in_range"
    NO_CONTACTS = "no_contacts"


class DeliveryStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    SERIALIZATION_FAILED = "serialization_failed"
    # The user switched emergency emails off; nothing was sent
    DISABLED = "disabled"


class NotificationStatus(str, Enum):
    ENQUEUED = "enqueued"
    FAILED = "failed"


@dataclass(frozen=True)
class DeliveryResult:
    status: DeliveryStatus
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is DeliveryStatus.SENT


@dataclass(frozen=True)
class NotificationResult:
    status: NotificationStatus
    notification_id: str
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is NotificationStatus.ENQUEUED


@dataclass(frozen=True)
class DispatchOutcome:
    state: DispatchState
    skip_reason: Optional[SkipReason] = None
    delivery: Optional[DeliveryResult] = None
    notification: Optional[NotificationResult] = None
    # The email that was attempted; kept so callers can record alert history
    request: Optional[EmailDeliveryRequest] = None

    @classmethod
    def skipped(cls, reason: SkipReason) -> "DispatchOutcome":
        state = DispatchState.CONTACTS_MISSING if reason is SkipReason.NO_CONTACTS else DispatchState.SKIPPED
        return cls(state=state, skip_reason=reason)

    @classmethod
    def done(
        cls,
        request: Optional[EmailDeliveryRequest],
        delivery: DeliveryResult,
        notification: NotificationResult
    ) -> "DispatchOutcome":
        return cls(
            state=DispatchState.DONE,
            delivery=delivery,
            notification=notification,
            request=request,
        )

    @property
    def contacts_missing(self) -> bool:
        return self.skip_reason is SkipReason.NO_CONTACTS

    @property
    def succeeded(self) -> bool:
        """True only when both the email and the local notification went through."""
        return (
            self.state is DispatchState.DONE
            and self.delivery is not None and self.delivery.ok
            and self.notification is not None and self.notification.ok
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"state": self.state.value}
        if self.skip_reason is not None:
            result["skip_reason"] = self.skip_reason.value
        if self.delivery is not None:
            result["delivery"] = {"status": self.delivery.status.value, "reason": self.delivery.reason}
        if self.notification is not None:
            result["notification"] = {
                "status": self.notification.status.value,
                "notification_id": self.notification.notification_id,
                "reason": self.notification.reason,
            }
        return result
