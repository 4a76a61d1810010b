"""
Service layer for per-user alert settings.

Settings are created lazily on first access. Edits validate their input and
persist the whole value; readers always get a fresh immutable snapshot.
"""
import logging
from typing import Tuple

from repositories import SettingsRepository, UserRepository
from models.settings import ThresholdRules, UserSettings
from core.exceptions import (
    ContactNotFoundError,
    DuplicateContactError,
    InvalidContactError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


def normalize_contact(email: str) -> str:
    """
    Validate and normalize an emergency contact address.

    Raises:
        InvalidContactError: If the address is blank or has no '@'.
    """
    contact = email.strip() if isinstance(email, str) else ""
    if not contact or "@" not in contact:
        raise InvalidContactError(email=email)
    return contact


class SettingsService:
    """Business logic for threshold rules, emergency contacts and the alerts switch."""

    def __init__(self, user_repository: UserRepository, settings_repository: SettingsRepository):
        self._user_repo = user_repository
        self._settings_repo = settings_repository

    def get_user_settings(self, user_id: int) -> UserSettings:
        """
        Snapshot of a user's settings, creating defaults on first access.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        user = self._user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id=user_id)

        thresholds, contacts, alerts_enabled = self._settings_repo.get_or_create(user_id)
        return UserSettings(
            user_id=user.id,
            display_name=user.name,
            thresholds=thresholds,
            emergency_contacts=contacts,
            emergency_alerts_enabled=alerts_enabled,
        )

    def update_thresholds(self, user_id: int, thresholds: ThresholdRules) -> UserSettings:
        """Replace a user's threshold rules."""
        self.get_user_settings(user_id)
        self._settings_repo.update_thresholds(user_id, thresholds)
        logger.info("Thresholds updated", extra={"user_id": user_id, "thresholds": thresholds.to_dict()})
        return self.get_user_settings(user_id)

    def set_emergency_alerts(self, user_id: int, enabled: bool) -> UserSettings:
        """Switch emergency emails on or off. Local notifications are unaffected."""
        self.get_user_settings(user_id)
        self._settings_repo.update_emergency_alerts(user_id, enabled)
        logger.info("Emergency alerts switched", extra={"user_id": user_id, "enabled": enabled})
        return self.get_user_settings(user_id)

    def add_contact(self, user_id: int, email: str) -> Tuple[str, ...]:
        """
        Append an emergency contact.

        Raises:
            InvalidContactError: If the address is not usable.
            DuplicateContactError: If the address is already listed.
        """
        contact = normalize_contact(email)
        current = self.get_user_settings(user_id).emergency_contacts

        if contact in current:
            raise DuplicateContactError(email=contact)

        updated = [*current, contact]
        self._settings_repo.update_contacts(user_id, updated)
        logger.info("Emergency contact added", extra={"user_id": user_id, "contacts": len(updated)})
        return tuple(updated)

    def remove_contact(self, user_id: int, email: str) -> Tuple[str, ...]:
        """
        Remove an emergency contact, keeping the order of the rest.

        Raises:
            ContactNotFoundError: If the address is not listed.
        """
        contact = email.strip()
        current = self.get_user_settings(user_id).emergency_contacts

        if contact not in current:
            raise ContactNotFoundError(email=contact)

        updated = [c for c in current if c != contact]
        self._settings_repo.update_contacts(user_id, updated)
        logger.info("Emergency contact removed", extra={"user_id": user_id, "contacts": len(updated)})
        return tuple(updated)
