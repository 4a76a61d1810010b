"""
Repository for vital reading database operations.

Readings of both kinds share one table; ``kind`` selects which variant
columns are meaningful. Rows are turned back into BloodPressure/BloodSugar
instances, so a corrupt row surfaces as InvalidMeasurementError rather than
as a half-populated object.

All SQL is encapsulated in this repository - no SQL in service or API layers.
"""
import logging
from datetime import date, time
from typing import List, Optional

from repositories.base import Database
from models.measurement import BloodPressure, BloodSugar, Measurement, VitalReading
from core.datetime_utils import format_iso, utc_now

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, user_id, kind, systolic, diastolic, level, reading_context, "
    "reading_date, reading_time"
)


def _row_to_reading(row: tuple) -> VitalReading:
    common = {
        "id": row[0],
        "user_id": row[1],
        "reading_date": date.fromisoformat(row[7]),
        "reading_time": time.fromisoformat(row[8]),
    }
    if row[2] == BloodPressure.kind:
        return BloodPressure(systolic=row[3], diastolic=row[4], **common)
    return BloodSugar(level=row[5], reading_context=row[6], **common)


class ReadingRepository:
    """
    Repository for vital reading CRUD and retention operations.

    It should be instantiated via core.dependencies.get_reading_repository().
    """

    def __init__(self, db: Database):
        self._db = db

    def save(self, reading: Measurement) -> None:
        """Insert a reading, or overwrite the stored one with the same id."""
        systolic = diastolic = level = context = None
        if isinstance(reading, BloodPressure):
            systolic, diastolic = reading.systolic, reading.diastolic
        elif isinstance(reading, BloodSugar):
            level, context = reading.level, reading.reading_context.value

        conn = self._db.get_connection()
        try:
            conn.execute(
                """
                INSERT INTO readings
                (id, user_id, kind, systolic, diastolic, level, reading_context,
                 reading_date, reading_time, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    systolic = excluded.systolic,
                    diastolic = excluded.diastolic,
                    level = excluded.level,
                    reading_context = excluded.reading_context,
                    reading_date = excluded.reading_date,
                    reading_time = excluded.reading_time
                """,
                (
                    reading.id,
                    reading.user_id,
                    reading.kind,
                    systolic,
                    diastolic,
                    level,
                    context,
                    reading.reading_date.isoformat(),
                    reading.reading_time.isoformat(timespec="seconds"),
                    format_iso(utc_now()),
                )
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, reading_id: str) -> Optional[VitalReading]:
        """Get a reading by id, or None if not found."""
        conn = self._db.get_connection()
        try:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM readings WHERE id = ?",
                (reading_id,)
            ).fetchone()
        finally:
            conn.close()

        return _row_to_reading(row) if row else None

    def get_for_user(
        self,
        user_id: int,
        kind: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[VitalReading]:
        """
        Get a user's readings, newest first.

        Args:
            user_id: Owning user.
            kind: Filter by measurement kind ("bp" or "sugar") (optional).
            limit: Maximum number of readings to return (optional).
        """
        query = f"SELECT {_COLUMNS} FROM readings WHERE user_id = ?"
        params: list = [user_id]

        if kind:
            query += " AND kind = ?"
            params.append(kind)

        query += " ORDER BY reading_date DESC, reading_time DESC"

        if limit:
            query += " LIMIT ?"
            params.append(limit)

        conn = self._db.get_connection()
        try:
            rows = conn.execute(query, params).fetchall()
        finally:
            conn.close()

        return [_row_to_reading(row) for row in rows]

    def delete(self, reading_id: str) -> bool:
        """Delete a reading. Returns False if no such reading existed."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute("DELETE FROM readings WHERE id = ?", (reading_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def delete_older_than(self, cutoff: date) -> int:
        """
        Delete every reading dated strictly before ``cutoff``.

        Returns:
            int: Number of readings removed.
        """
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                "DELETE FROM readings WHERE reading_date < ?",
                (cutoff.isoformat(),)
            )
            conn.commit()
            removed = cursor.rowcount
        finally:
            conn.close()

        logger.info(
            "Expired readings purged",
            extra={"cutoff": cutoff.isoformat(), "removed": removed}
        )
        return removed
