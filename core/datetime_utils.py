"""
UTC-first datetime utilities for Vital Alerts Service.

Timestamps that the service creates (created_at, sent_at) are UTC and stored
as ISO 8601 strings with a 'Z' suffix. Reading dates and times-of-day are
wall-clock values entered by the user and are stored without a timezone.

Usage:
    from core.datetime_utils import utc_now, format_iso, retention_cutoff

    now = utc_now()
    iso_str = format_iso(now)             # "2024-01-15T05:00:00Z"
    cutoff = retention_cutoff(30)         # date 30 days before today (UTC)
"""
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)


# =============================================================================
# CORE UTILITIES
# =============================================================================

def utc_now() -> datetime:
    """
    Get current datetime in UTC with timezone info.

    Returns:
        datetime: Current time as timezone-aware datetime in UTC.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    - If datetime is naive (no timezone), assumes it's already UTC
    - If datetime has timezone, converts to UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def retention_cutoff(days: int, today: Optional[date] = None) -> date:
    """
    Get the oldest reading date that survives a retention sweep.

    Readings dated strictly before the returned date are expired.

    Args:
        days: Retention window in days.
        today: Reference date (defaults to today's UTC date).

    Example:
        >>> retention_cutoff(30, today=date(2024, 3, 31))
        datetime.date(2024, 3, 1)
    """
    reference = today or utc_now().date()
    return reference - timedelta(days=days)


# =============================================================================
# PARSING
# =============================================================================

def parse_datetime(value: str) -> datetime:
    """
    Parse an ISO 8601 string to a UTC datetime.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    value = value.strip()
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    return to_utc(datetime.fromisoformat(value))


def from_db_string(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a datetime string read from SQLite.

    Returns None (and logs) for missing or corrupt values instead of failing
    a whole listing on one bad row.
    """
    if value is None:
        return None
    try:
        return parse_datetime(value)
    except ValueError as e:
        logger.warning(f"Failed to parse datetime '{value}': {e}")
        return None


# =============================================================================
# FORMATTING
# =============================================================================

def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string with UTC timezone.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00Z'
    """
    return to_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_reading_time(value: time) -> str:
    """
    Format a reading's time-of-day for alert messages.

    Example:
        >>> format_reading_time(time(21, 5))
        '09:05 PM'
    """
    return value.strftime("%I:%M %p")


def format_reading_date(value: date) -> str:
    """
    Format a reading's calendar date for alert messages.

    Example:
        >>> format_reading_date(date(2024, 1, 15))
        '2024-01-15'
    """
    return value.strftime("%Y-%m-%d")
