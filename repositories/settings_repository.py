"""
Repository for per-user alert settings (thresholds, emergency contacts and
the emergency email switch).

Settings rows are created lazily: the first read for a user inserts the
registry defaults with an empty contact list and emergency emails on.
"""
import json
import logging
from typing import List, Tuple

from repositories.base import Database
from models.settings import BpThreshold, SugarThreshold, ThresholdRules
from core.datetime_utils import format_iso, utc_now

logger = logging.getLogger(__name__)


class SettingsRepository:
    """
    Repository for the user_settings table.

    It should be instantiated via core.dependencies.get_settings_repository().
    """

    def __init__(self, db: Database):
        self._db = db

    def get_or_create(self, user_id: int) -> Tuple[ThresholdRules, Tuple[str, ...], bool]:
        """
        Load a user's settings, creating defaults on first access.

        Returns:
            (thresholds, emergency_contacts, emergency_alerts_enabled)
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute(
                """
                SELECT min_systolic, max_systolic, min_diastolic, max_diastolic,
                       fasting_min, fasting_max, after_meal_min, after_meal_max,
                       emergency_contacts, emergency_alerts_enabled
                FROM user_settings WHERE user_id = ?
                """,
                (user_id,)
            )
            row = cursor.fetchone()

            if row is None:
                defaults = ThresholdRules.defaults()
                # OR IGNORE: a concurrent first access may have inserted already
                cursor.execute(
                    """
                    INSERT OR IGNORE INTO user_settings
                    (user_id, min_systolic, max_systolic, min_diastolic, max_diastolic,
                     fasting_min, fasting_max, after_meal_min, after_meal_max,
                     emergency_contacts, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, '[]', ?)
                    """,
                    (user_id, *self._threshold_columns(defaults), format_iso(utc_now()))
                )
                conn.commit()
                logger.info("Default alert settings created", extra={"user_id": user_id})
                return defaults, (), True

            thresholds = ThresholdRules(
                bp=BpThreshold(row[0], row[1], row[2], row[3]),
                fasting=SugarThreshold(row[4], row[5]),
                after_meal=SugarThreshold(row[6], row[7]),
            )
            return thresholds, tuple(json.loads(row[8])), bool(row[9])
        finally:
            conn.close()

    def update_thresholds(self, user_id: int, thresholds: ThresholdRules) -> None:
        """Replace a user's threshold rules (the row must already exist)."""
        conn = self._db.get_connection()
        try:
            conn.execute(
                """
                UPDATE user_settings SET
                    min_systolic = ?, max_systolic = ?, min_diastolic = ?, max_diastolic = ?,
                    fasting_min = ?, fasting_max = ?, after_meal_min = ?, after_meal_max = ?,
                    updated_at = ?
                WHERE user_id = ?
                """,
                (*self._threshold_columns(thresholds), format_iso(utc_now()), user_id)
            )
            conn.commit()
        finally:
            conn.close()

    def update_contacts(self, user_id: int, contacts: List[str]) -> None:
        """Replace a user's ordered emergency contact list (the row must already exist)."""
        conn = self._db.get_connection()
        try:
            conn.execute(
                "UPDATE user_settings SET emergency_contacts = ?, updated_at = ? WHERE user_id = ?",
                (json.dumps(list(contacts)), format_iso(utc_now()), user_id)
            )
            conn.commit()
        finally:
            conn.close()

    def update_emergency_alerts(self, user_id: int, enabled: bool) -> None:
        """Switch emergency emails on or off (the row must already exist)."""
        conn = self._db.get_connection()
        try:
            conn.execute(
                "UPDATE user_settings SET emergency_alerts_enabled = ?, updated_at = ? WHERE user_id = ?",
                (1 if enabled else 0, format_iso(utc_now()), user_id)
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _threshold_columns(thresholds: ThresholdRules) -> Tuple[int, ...]:
        bp = thresholds.bp
        return (
            bp.min_systolic, bp.max_systolic, bp.min_diastolic, bp.max_diastolic,
            thresholds.fasting.min, thresholds.fasting.max,
            thresholds.after_meal.min, thresholds.after_meal.max,
        )
