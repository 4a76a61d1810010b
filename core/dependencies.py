"""
FastAPI Dependency Injection configuration for Vital Alerts Service.

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    Service Layer (VitalsService, SettingsService, ...)
         ↓ Injected
    AlertDispatcher ── EmailRelayClient, NotificationSink
         ↓ Injected
    Repository Layer (Data Access)
         ↓ Injected
    Database (SQLite Connection)

Usage in Routers:
    from core.dependencies import get_vitals_service

    @router.post("/users/{user_id}/readings")
    async def log_reading(
        ...,
        vitals_service: VitalsService = Depends(get_vitals_service)
    ):
        ...

Testing:
    app.dependency_overrides[get_vitals_service] = lambda: test_vitals_service
"""
import logging
from typing import Optional

from core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# DATABASE DEPENDENCY
# =============================================================================

_database_instance: Optional["Database"] = None


def get_database() -> "Database":
    """
    Get the database instance (created once, then shared).

    Note:
        Imported here to avoid circular imports with repositories.
    """
    global _database_instance

    if _database_instance is None:
        from repositories.base import Database

        settings.ensure_directories()
        logger.info(f"Initializing database: {settings.database_path}")
        _database_instance = Database(
            db_path=settings.database_path,
            busy_timeout=settings.vitals_svc_db_busy_timeout
        )
        logger.info("Database initialized successfully")

    return _database_instance


def reset_database() -> None:
    """Reset the database instance (for testing only)."""
    global _database_instance
    _database_instance = None


# =============================================================================
# REPOSITORY DEPENDENCIES
# =============================================================================

def get_user_repository() -> "UserRepository":
    from repositories import UserRepository

    return UserRepository(db=get_database())


def get_reading_repository() -> "ReadingRepository":
    from repositories import ReadingRepository

    return ReadingRepository(db=get_database())


def get_settings_repository() -> "SettingsRepository":
    from repositories import SettingsRepository

    return SettingsRepository(db=get_database())


def get_alert_repository() -> "AlertRepository":
    from repositories import AlertRepository

    return AlertRepository(db=get_database())


def get_notification_repository() -> "NotificationRepository":
    from repositories import NotificationRepository

    return NotificationRepository(db=get_database())


# =============================================================================
# COLLABORATOR DEPENDENCIES
# =============================================================================

_no_contacts_signal: Optional["NoContactsSignal"] = None


def get_no_contacts_signal() -> "NoContactsSignal":
    """
    Get the process-wide "no emergency contacts" signal.

    Shared so that listeners connected at startup see every dispatch.
    """
    global _no_contacts_signal

    if _no_contacts_signal is None:
        from services.signals import NoContactsSignal

        _no_contacts_signal = NoContactsSignal()
    return _no_contacts_signal


def get_email_relay_client() -> Optional["EmailRelayClient"]:
    """
    Get the email relay client, or None when EMAIL_RELAY_URL is empty.

    Without a relay the dispatcher reports every email as failed and still
    queues the local notification.
    """
    from clients.email_relay_client import EmailRelayClient

    if not settings.email_relay_url:
        return None
    return EmailRelayClient(
        base_url=settings.email_relay_url,
        timeout=settings.email_relay_timeout
    )


def get_notification_sink() -> "NotificationSink":
    from services.notification_sink import RepositoryNotificationSink

    return RepositoryNotificationSink(notification_repository=get_notification_repository())


def get_alert_dispatcher() -> "AlertDispatcher":
    """
    Get an AlertDispatcher wired to the email relay and the SQLite notification sink.
    """
    from services.alert_dispatcher import AlertDispatcher

    return AlertDispatcher(
        email_client=get_email_relay_client(),
        notification_sink=get_notification_sink(),
        app_name=settings.vitals_svc_app_name,
        no_contacts_signal=get_no_contacts_signal()
    )


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_user_service() -> "UserService":
    from services import UserService

    return UserService(user_repository=get_user_repository())


def get_settings_service() -> "SettingsService":
    from services import SettingsService

    return SettingsService(
        user_repository=get_user_repository(),
        settings_repository=get_settings_repository()
    )


def get_vitals_service() -> "VitalsService":
    """
    Get a VitalsService with settings, repositories and dispatcher injected.
    """
    from services import VitalsService

    return VitalsService(
        settings_service=get_settings_service(),
        reading_repository=get_reading_repository(),
        alert_repository=get_alert_repository(),
        dispatcher=get_alert_dispatcher(),
        retention_days=settings.vitals_svc_retention_days
    )


def get_alert_history_service() -> "AlertHistoryService":
    from services import AlertHistoryService

    return AlertHistoryService(
        user_repository=get_user_repository(),
        alert_repository=get_alert_repository(),
        notification_repository=get_notification_repository()
    )


def get_alert_check_service() -> "AlertCheckService":
    """
    Get an AlertCheckService sharing the dispatcher wiring used for real alerts.
    """
    from services import AlertCheckService

    return AlertCheckService(
        settings_service=get_settings_service(),
        dispatcher=get_alert_dispatcher(),
        alert_repository=get_alert_repository()
    )
