"""
Repository layer for database access.

This module contains all database access operations, encapsulating SQL and data persistence logic.
"""
from repositories.base import Database
from repositories.user_repository import UserRepository
from repositories.reading_repository import ReadingRepository
from repositories.settings_repository import SettingsRepository
from repositories.alert_repository import AlertRepository
from repositories.notification_repository import NotificationRepository

__all__ = [
    "Database",
    "UserRepository",
    "ReadingRepository",
    "SettingsRepository",
    "AlertRepository",
    "NotificationRepository",
]
