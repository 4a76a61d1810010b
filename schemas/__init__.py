"""
Pydantic schemas for API request/response validation.

This module contains all Pydantic models used at API boundaries.
"""
from schemas.user import UserCreate, UserResponse
from schemas.reading import (
    BloodPressureCreate,
    BloodSugarCreate,
    ReadingCreate,
    ReadingResponse,
    ReadingLogResponse,
    PurgeResponse,
)
from schemas.settings import (
    BpThresholdSchema,
    SugarThresholdSchema,
    ThresholdsPayload,
    EmergencyAlertsSetting,
    ContactCreate,
    ContactsResponse,
)
from schemas.alert import (
    AlertResponse,
    AlertStatsResponse,
    NotificationResponse,
)

__all__ = [
    # User schemas
    "UserCreate",
    "UserResponse",
    # Reading schemas
    "BloodPressureCreate",
    "BloodSugarCreate",
    "ReadingCreate",
    "ReadingResponse",
    "ReadingLogResponse",
    "PurgeResponse",
    # Settings schemas
    "BpThresholdSchema",
    "SugarThresholdSchema",
    "ThresholdsPayload",
    "EmergencyAlertsSetting",
    "ContactCreate",
    "ContactsResponse",
    # Alert schemas
    "AlertResponse",
    "AlertStatsResponse",
    "NotificationResponse",
]
