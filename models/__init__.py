"""
Domain models for the vital alerts service.

This module contains the measurement union, settings snapshot, verdicts,
dispatch outcomes and persisted records.
"""
from models.user import User
from models.measurement import (
    Measurement,
    BloodPressure,
    BloodSugar,
    ReadingContext,
    VitalReading,
)
from models.settings import BpThreshold, SugarThreshold, ThresholdRules, UserSettings
from models.verdict import InRange, OutOfRange, Verdict, ViolatedBound
from models.alert import (
    AlertRecord,
    AlertStatus,
    EmailDeliveryRequest,
    LocalNotification,
    notification_id_for,
)
from models.outcome import (
    DeliveryResult,
    DeliveryStatus,
    DispatchOutcome,
    DispatchState,
    NotificationResult,
    NotificationStatus,
    SkipReason,
)

__all__ = [
    "User",
    "Measurement",
    "BloodPressure",
    "BloodSugar",
    "ReadingContext",
    "VitalReading",
    "BpThreshold",
    "SugarThreshold",
    "ThresholdRules",
    "UserSettings",
    "InRange",
    "OutOfRange",
    "Verdict",
    "ViolatedBound",
    "AlertRecord",
    "AlertStatus",
    "EmailDeliveryRequest",
    "LocalNotification",
    "notification_id_for",
    "DeliveryResult",
    "DeliveryStatus",
    "DispatchOutcome",
    "DispatchState",
    "NotificationResult",
    "NotificationStatus",
    "SkipReason",
]
