"""
Domain model for users.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from core.datetime_utils import format_iso, from_db_string


@dataclass
class User:
    """Model representing an account whose vitals are tracked."""

    id: int
    email: str
    name: str
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert user to dictionary for API responses."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "created_at": format_iso(self.created_at),
        }

    @classmethod
    def from_row(cls, row: tuple) -> 'User':
        """
        Create a User from a database row tuple.

        Args:
            row: Tuple of (id, email, name, created_at) from database query.
        """
        return cls(
            id=row[0],
            email=row[1],
            name=row[2],
            created_at=from_db_string(row[3]),
        )
