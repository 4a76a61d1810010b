"""
Core module for application configuration, logging, and shared constants.

This module provides:
- Settings: Application configuration via pydantic-settings
- Dependency injection: FastAPI Depends() functions for services and repositories
- Exceptions: Domain-specific exception classes with HTTP status codes
- Datetime utilities: UTC-first datetime handling
- Vital registry: Vital sign labels, units and default ranges
"""
from core.config import settings, Settings

from core.exceptions import (
    VitalsServiceError,
    UserNotFoundError,
    DuplicateUserError,
    InvalidMeasurementError,
    ReadingNotFoundError,
    InvalidThresholdError,
    InvalidContactError,
    DuplicateContactError,
    ContactNotFoundError,
    NoEmergencyContactsError,
    DatabaseError,
    ExternalServiceError,
    EmailRelayError,
    EmailRelayConnectionError,
    EmailSerializationError,
    NotificationSinkError,
    setup_exception_handlers,
)

from core.datetime_utils import (
    utc_now,
    to_utc,
    format_iso,
    retention_cutoff,
)

from core.vital_registry import (
    VitalDefinition,
    get_vital,
    list_vitals,
    get_default_range,
)

__all__ = [
    # Settings
    "settings",
    "Settings",
    # Exceptions
    "VitalsServiceError",
    "UserNotFoundError",
    "DuplicateUserError",
    "InvalidMeasurementError",
    "ReadingNotFoundError",
    "InvalidThresholdError",
    "InvalidContactError",
    "DuplicateContactError",
    "ContactNotFoundError",
    "NoEmergencyContactsError",
    "DatabaseError",
    "ExternalServiceError",
    "EmailRelayError",
    "EmailRelayConnectionError",
    "EmailSerializationError",
    "NotificationSinkError",
    "setup_exception_handlers",
    # Datetime utilities
    "utc_now",
    "to_utc",
    "format_iso",
    "retention_cutoff",
    # Vital registry
    "VitalDefinition",
    "get_vital",
    "list_vitals",
    "get_default_range",
]
