"""
Users router - account endpoints.

Architecture:
    HTTP Request → Router (this file) → UserService → UserRepository → Database
"""
import logging
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from schemas import UserCreate, UserResponse
from services import UserService
from core.dependencies import get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/users",
    tags=["Users"],
)


# =============================================================================
# SAFE DEFAULTS
# =============================================================================

DEFAULT_QUERY_LIMIT = 100
MAX_QUERY_LIMIT = 500


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "",
    response_model=UserResponse,
    status_code=201,
    summary="Create a new user",
    description="Register a user whose vitals will be tracked. Email addresses must be unique."
)
async def create_user(
    user: UserCreate,
    user_service: UserService = Depends(get_user_service)
):
    """
    Create a new user.

    - **email**: Email address (required, unique, stored lowercased)
    - **name**: Display name used in alert emails

    Raises 409 Conflict if the email is already registered.
    """
    created = user_service.add_user(email=user.email, name=user.name)
    return UserResponse(**created.to_dict())


@router.get(
    "",
    response_model=List[UserResponse],
    summary="List all users",
    description=f"Retrieve all users sorted by name. "
                f"Default limit is {DEFAULT_QUERY_LIMIT}, maximum is {MAX_QUERY_LIMIT}."
)
async def list_users(
    limit: Optional[int] = Query(
        None,
        ge=1,
        le=MAX_QUERY_LIMIT,
        description=f"Maximum number of users to return (1-{MAX_QUERY_LIMIT}). "
                    f"Defaults to {DEFAULT_QUERY_LIMIT} if not specified.",
        examples=[50]
    ),
    user_service: UserService = Depends(get_user_service)
):
    effective_limit = limit
    if effective_limit is None:
        effective_limit = DEFAULT_QUERY_LIMIT
        logger.warning(
            "No limit specified for user list, applying default",
            extra={"default_limit": DEFAULT_QUERY_LIMIT}
        )

    users = user_service.get_users()[:effective_limit]
    return [UserResponse(**u.to_dict()) for u in users]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user",
    description="Retrieve a single user by ID. Returns 404 if the user does not exist."
)
async def get_user(
    user_id: int,
    user_service: UserService = Depends(get_user_service)
):
    return UserResponse(**user_service.get_user(user_id).to_dict())
