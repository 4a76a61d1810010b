"""
Settings router - threshold rules, the emergency alerts switch and emergency contacts.

Architecture:
    HTTP Request → Router (this file) → SettingsService → SettingsRepository → Database

Settings are created with registry defaults the first time they are read.
"""
import logging
from fastapi import APIRouter, Depends

from schemas import ThresholdsPayload, EmergencyAlertsSetting, ContactCreate, ContactsResponse
from services import SettingsService
from core.dependencies import get_settings_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/users/{user_id}/settings",
    tags=["Settings"],
)


# =============================================================================
# THRESHOLDS
# =============================================================================

@router.get(
    "/thresholds",
    response_model=ThresholdsPayload,
    summary="Get threshold rules",
    description="Retrieve the user's normal ranges for blood pressure and blood sugar."
)
async def get_thresholds(
    user_id: int,
    settings_service: SettingsService = Depends(get_settings_service)
):
    user_settings = settings_service.get_user_settings(user_id)
    return ThresholdsPayload.from_rules(user_settings.thresholds)


@router.put(
    "/thresholds",
    response_model=ThresholdsPayload,
    summary="Replace threshold rules",
    description="Replace all of the user's threshold rules. Each minimum must not exceed its maximum."
)
async def update_thresholds(
    user_id: int,
    payload: ThresholdsPayload,
    settings_service: SettingsService = Depends(get_settings_service)
):
    """
    Raises:
    - 400 Bad Request: If a minimum is greater than its maximum
    - 404 Not Found: If the user doesn't exist
    """
    user_settings = settings_service.update_thresholds(user_id, payload.to_rules())
    return ThresholdsPayload.from_rules(user_settings.thresholds)


# =============================================================================
# EMERGENCY ALERTS SWITCH
# =============================================================================

@router.get(
    "/alerts",
    response_model=EmergencyAlertsSetting,
    summary="Get the emergency alerts switch"
)
async def get_emergency_alerts(
    user_id: int,
    settings_service: SettingsService = Depends(get_settings_service)
):
    user_settings = settings_service.get_user_settings(user_id)
    return EmergencyAlertsSetting(emergency_alerts_enabled=user_settings.emergency_alerts_enabled)


@router.put(
    "/alerts",
    response_model=EmergencyAlertsSetting,
    summary="Switch emergency alerts on or off",
    description="When off, out-of-range readings still raise a local notification but no email is sent."
)
async def update_emergency_alerts(
    user_id: int,
    payload: EmergencyAlertsSetting,
    settings_service: SettingsService = Depends(get_settings_service)
):
    user_settings = settings_service.set_emergency_alerts(user_id, payload.emergency_alerts_enabled)
    return EmergencyAlertsSetting(emergency_alerts_enabled=user_settings.emergency_alerts_enabled)


# =============================================================================
# EMERGENCY CONTACTS
# =============================================================================

@router.get(
    "/contacts",
    response_model=ContactsResponse,
    summary="List emergency contacts"
)
async def list_contacts(
    user_id: int,
    settings_service: SettingsService = Depends(get_settings_service)
):
    user_settings = settings_service.get_user_settings(user_id)
    return ContactsResponse(user_id=user_id, emergency_contacts=list(user_settings.emergency_contacts))


@router.post(
    "/contacts",
    response_model=ContactsResponse,
    status_code=201,
    summary="Add an emergency contact",
    description="Add an email address that receives out-of-range alerts. "
                "The address is trimmed, must contain '@' and must not already be listed."
)
async def add_contact(
    user_id: int,
    contact: ContactCreate,
    settings_service: SettingsService = Depends(get_settings_service)
):
    contacts = settings_service.add_contact(user_id, contact.email)
    return ContactsResponse(user_id=user_id, emergency_contacts=list(contacts))


@router.delete(
    "/contacts/{email}",
    response_model=ContactsResponse,
    summary="Remove an emergency contact"
)
async def remove_contact(
    user_id: int,
    email: str,
    settings_service: SettingsService = Depends(get_settings_service)
):
    contacts = settings_service.remove_contact(user_id, email)
    return ContactsResponse(user_id=user_id, emergency_contacts=list(contacts))
