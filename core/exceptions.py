"""
Shared exception classes and error handling utilities for Vital Alerts Service.

This module provides:
- Custom exception hierarchy for domain-specific errors
- Consistent error response formatting
- Exception handlers for FastAPI integration

Usage:
    from core.exceptions import UserNotFoundError, InvalidMeasurementError

    # In model/service layer - raise domain exceptions
    raise UserNotFoundError(user_id=42)

    # In FastAPI - register handlers via setup_exception_handlers(app)

Note that the alert dispatcher never raises these: delivery and notification
failures are reported through DispatchOutcome instead.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASSES
# =============================================================================

class VitalsServiceError(Exception):
    """
    Base exception for all Vital Alerts Service domain errors.

    Provides consistent error structure with status code and detail message.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ):
        """
        Initialize the exception.

        Args:
            detail: Human-readable error message. Uses class default if not provided.
            status_code: HTTP status code. Uses class default if not provided.
            **kwargs: Additional context to include in error response.
        """
        self.detail = detail or self.__class__.detail
        self.status_code = status_code or self.__class__.status_code
        self.context = kwargs
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result = {"detail": self.detail}
        if self.context:
            result["context"] = self.context
        return result


# =============================================================================
# USER EXCEPTIONS
# =============================================================================

class UserNotFoundError(VitalsServiceError):
    """Raised when a user is not found in the database."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "User not found"

    def __init__(self, user_id: Optional[int] = None, **kwargs: Any):
        detail = f"User {user_id} not found" if user_id is not None else self.detail
        super().__init__(detail=detail, user_id=user_id, **kwargs)


class DuplicateUserError(VitalsServiceError):
    """Raised when attempting to create a user whose email is already registered."""

    status_code = status.HTTP_409_CONFLICT
    detail = "User already exists"

    def __init__(self, email: Optional[str] = None, **kwargs: Any):
        detail = f"User with email '{email}' already exists" if email else self.detail
        super().__init__(detail=detail, email=email, **kwargs)


# =============================================================================
# MEASUREMENT EXCEPTIONS
# =============================================================================

class InvalidMeasurementError(VitalsServiceError):
    """
    Raised when a measurement is missing a field required by its variant.

    Fatal to the evaluation of that reading: callers must not evaluate or
    dispatch an invalid measurement.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid measurement"


class ReadingNotFoundError(VitalsServiceError):
    """Raised when a vital reading is not found."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Reading not found"

    def __init__(self, reading_id: Optional[str] = None, **kwargs: Any):
        detail = f"Reading '{reading_id}' not found" if reading_id else self.detail
        super().__init__(detail=detail, reading_id=reading_id, **kwargs)


# =============================================================================
# SETTINGS EXCEPTIONS
# =============================================================================

class InvalidThresholdError(VitalsServiceError):
    """Raised when a threshold rule has a lower bound above its upper bound."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid threshold range"


class InvalidContactError(VitalsServiceError):
    """Raised when an emergency contact is not a usable email address."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Please enter a valid email address"


class DuplicateContactError(VitalsServiceError):
    """Raised when an emergency contact is already in the list."""

    status_code = status.HTTP_409_CONFLICT
    detail = "Contact already exists"

    def __init__(self, email: Optional[str] = None, **kwargs: Any):
        detail = f"Contact '{email}' already exists" if email else self.detail
        super().__init__(detail=detail, email=email, **kwargs)


class ContactNotFoundError(VitalsServiceError):
    """Raised when removing an emergency contact that is not in the list."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Contact not found"

    def __init__(self, email: Optional[str] = None, **kwargs: Any):
        detail = f"Contact '{email}' not found" if email else self.detail
        super().__init__(detail=detail, email=email, **kwargs)


class NoEmergencyContactsError(VitalsServiceError):
    """Raised when an action needs at least one emergency contact and there are none."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "No emergency contacts configured"


# =============================================================================
# DATABASE EXCEPTIONS
# =============================================================================

class DatabaseError(VitalsServiceError):
    """Raised when a database operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Database operation failed"

    def __init__(self, operation: Optional[str] = None, **kwargs: Any):
        detail = f"Database error during {operation}" if operation else self.detail
        super().__init__(detail=detail, operation=operation, **kwargs)


# =============================================================================
# EXTERNAL SERVICE EXCEPTIONS
# =============================================================================

class ExternalServiceError(VitalsServiceError):
    """Raised when an external service call fails."""

    status_code = status.HTTP_502_BAD_GATEWAY
    detail = "External service error"


class EmailRelayError(ExternalServiceError):
    """Email relay answered with a non-200 status."""

    detail = "Email relay rejected the request"


class EmailRelayConnectionError(ExternalServiceError):
    """Email relay could not be reached (connect error, timeout, protocol error)."""

    detail = "Email relay unreachable"


class EmailSerializationError(ExternalServiceError):
    """The email delivery request could not be encoded as JSON."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Email request could not be serialized"


class NotificationSinkError(ExternalServiceError):
    """The local notification sink refused or failed an enqueue."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Notification enqueue failed"


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def vitals_service_exception_handler(
    request: Request,
    exc: VitalsServiceError
) -> JSONResponse:
    """
    Handle VitalsServiceError exceptions and return consistent JSON responses.
    """
    logger.warning(
        f"VitalsServiceError: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(VitalsServiceError, vitals_service_exception_handler)
