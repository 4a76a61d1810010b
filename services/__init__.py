"""
Service layer for business logic.

This module contains service classes that orchestrate business logic
and coordinate calls to repositories and external collaborators.
"""
from services.threshold_evaluator import evaluate, format_value
from services.alert_dispatcher import AlertDispatcher
from services.notification_sink import (
    NotificationSink,
    InMemoryNotificationSink,
    RepositoryNotificationSink,
)
from services.signals import NoContactsSignal
from services.user_service import UserService
from services.settings_service import SettingsService
from services.vitals_service import VitalsService, ReadingResult
from services.alert_history_service import AlertHistoryService
from services.alert_check_service import AlertCheckService

__all__ = [
    "evaluate",
    "format_value",
    "AlertDispatcher",
    "NotificationSink",
    "InMemoryNotificationSink",
    "RepositoryNotificationSink",
    "NoContactsSignal",
    "UserService",
    "SettingsService",
    "VitalsService",
    "ReadingResult",
    "AlertHistoryService",
    "AlertCheckService",
]
