"""
Repository for user database operations.

All SQL for users is encapsulated here - no SQL in service or API layers.
"""
import logging
import sqlite3
from typing import List, Optional

from repositories.base import Database
from models.user import User
from core.datetime_utils import format_iso, utc_now

logger = logging.getLogger(__name__)


class UserRepository:
    """
    Repository for user CRUD operations.

    It should be instantiated via core.dependencies.get_user_repository().
    """

    def __init__(self, db: Database):
        self._db = db

    def add(self, email: str, name: str) -> Optional[User]:
        """
        Add a new user and return the created record.

        Returns:
            The created User, or None if the email is already registered
            (UNIQUE constraint violation).
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "INSERT INTO users (email, name, created_at) VALUES (?, ?, ?)",
                (email, name, format_iso(utc_now()))
            )
            user_id = cursor.lastrowid

            cursor.execute(
                "SELECT id, email, name, created_at FROM users WHERE id = ?",
                (user_id,)
            )
            row = cursor.fetchone()
            conn.commit()

            return User.from_row(row) if row else None
        except sqlite3.IntegrityError:
            return None
        finally:
            conn.close()

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get a user by id, or None if not found."""
        conn = self._db.get_connection()
        try:
            row = conn.execute(
                "SELECT id, email, name, created_at FROM users WHERE id = ?",
                (user_id,)
            ).fetchone()
        finally:
            conn.close()

        return User.from_row(row) if row else None

    def get_all(self) -> List[User]:
        """Get all users sorted alphabetically by name."""
        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                "SELECT id, email, name, created_at FROM users ORDER BY name ASC"
            ).fetchall()
        finally:
            conn.close()

        return [User.from_row(row) for row in rows]
