"""
Service layer for user operations.
"""
import logging
from typing import List

from repositories import UserRepository
from models.user import User
from core.exceptions import DuplicateUserError, UserNotFoundError

logger = logging.getLogger(__name__)


class UserService:
    """Business logic for user registration and lookup."""

    def __init__(self, user_repository: UserRepository):
        self._user_repo = user_repository

    def add_user(self, email: str, name: str) -> User:
        """
        Register a user.

        Raises:
            DuplicateUserError: If the email is already registered.
        """
        email = email.strip().lower()
        user = self._user_repo.add(email=email, name=name.strip())
        if user is None:
            logger.warning(f"User already exists: {email}")
            raise DuplicateUserError(email=email)

        logger.info("User created", extra={"user_id": user.id})
        return user

    def get_user(self, user_id: int) -> User:
        """
        Raises:
            UserNotFoundError: If no such user exists.
        """
        user = self._user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id=user_id)
        return user

    def get_users(self) -> List[User]:
        return self._user_repo.get_all()
