"""
Service layer for vital readings.

This service contains the "log a reading" flow and reading housekeeping.

Architecture:
    API Layer (routers) → VitalsService → evaluate() / AlertDispatcher
                                        → Repositories → Database

Dependency Injection:
    VitalsService receives its collaborators via constructor injection.
    Use core.dependencies.get_vitals_service() in routers with Depends().
"""
import logging
import sqlite3
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from repositories import AlertRepository, ReadingRepository
from models.alert import AlertRecord, AlertStatus
from models.measurement import Measurement, VitalReading
from models.outcome import DeliveryStatus, DispatchOutcome
from models.verdict import Verdict
from services.alert_dispatcher import AlertDispatcher
from services.settings_service import SettingsService
from services.threshold_evaluator import evaluate
from core.datetime_utils import retention_cutoff
from core.exceptions import DatabaseError, ReadingNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadingResult:
    """Everything that happened when a reading was logged."""

    reading: Measurement
    verdict: Verdict
    outcome: DispatchOutcome
    alert: Optional[AlertRecord] = None


class VitalsService:
    """
    Orchestrates reading storage, evaluation and alert dispatch.
    """

    def __init__(
        self,
        settings_service: SettingsService,
        reading_repository: ReadingRepository,
        alert_repository: AlertRepository,
        dispatcher: AlertDispatcher,
        retention_days: int
    ):
        self._settings_service = settings_service
        self._reading_repo = reading_repository
        self._alert_repo = alert_repository
        self._dispatcher = dispatcher
        self._retention_days = retention_days

    @property
    def retention_days(self) -> int:
        return self._retention_days

    async def log_reading(self, measurement: Measurement) -> ReadingResult:
        """
        Store a reading, evaluate it and alert if it is out of range.

        The settings snapshot is taken once, before anything is written, and
        is what both evaluation and dispatch see.

        Raises:
            UserNotFoundError: If the owning user does not exist.
            DatabaseError: If the reading could not be stored.
        """
        user_settings = self._settings_service.get_user_settings(measurement.user_id)

        try:
            self._reading_repo.save(measurement)
        except sqlite3.Error as e:
            logger.error(f"Database error saving reading: {e}", exc_info=True)
            raise DatabaseError(operation="log_reading") from e

        verdict = evaluate(measurement, user_settings.thresholds)
        logger.info(
            "Reading logged",
            extra={
                "reading_id": measurement.id,
                "user_id": measurement.user_id,
                "kind": measurement.kind,
                "out_of_range": verdict.is_out_of_range,
            }
        )

        outcome = await self._dispatcher.dispatch(measurement, verdict, user_settings)
        alert = self._record_alert(measurement, outcome)

        return ReadingResult(reading=measurement, verdict=verdict, outcome=outcome, alert=alert)

    def _record_alert(self, measurement: Measurement, outcome: DispatchOutcome) -> Optional[AlertRecord]:
        if outcome.request is None or outcome.delivery is None:
            return None

        status = AlertStatus.SENT if outcome.delivery.status is DeliveryStatus.SENT else AlertStatus.FAILED
        try:
            return self._alert_repo.record(
                user_id=measurement.user_id,
                reading_id=measurement.id,
                request=outcome.request,
                status=status,
                reason=outcome.delivery.reason,
            )
        except sqlite3.Error:
            # The email already went out; losing the history row must not fail the request
            logger.exception("Failed to record alert history", extra={"reading_id": measurement.id})
            return None

    def get_readings(
        self,
        user_id: int,
        kind: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[VitalReading]:
        """Get a user's readings, newest first."""
        self._settings_service.get_user_settings(user_id)
        return self._reading_repo.get_for_user(user_id, kind=kind, limit=limit)

    def delete_reading(self, reading_id: str) -> None:
        """
        Raises:
            ReadingNotFoundError: If the reading does not exist.
        """
        if not self._reading_repo.delete(reading_id):
            raise ReadingNotFoundError(reading_id=reading_id)
        logger.info("Reading deleted", extra={"reading_id": reading_id})

    def purge_expired_readings(self, today: Optional[date] = None) -> int:
        """
        Retention sweep: delete readings older than the retention window.

        Returns:
            int: Number of readings removed.
        """
        cutoff = retention_cutoff(self._retention_days, today=today)
        return self._reading_repo.delete_older_than(cutoff)
