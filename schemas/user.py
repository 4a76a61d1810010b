"""
Pydantic schemas for user-related API operations.
"""
from pydantic import BaseModel, Field, field_validator


class UserCreate(BaseModel):
    """Schema for creating a new user.

    Email addresses are stored lowercased and must be unique.
    """
    email: str = Field(
        ...,
        min_length=3,
        max_length=254,
        description="User email address (must be unique)",
        examples=["jane@example.com"]
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name used in alert emails",
        examples=["Jane Doe"]
    )

    @field_validator("email")
    @classmethod
    def email_has_at(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("Please enter a valid email address")
        return v.strip()

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name must not be blank")
        return v.strip()

    class Config:
        json_schema_extra = {
            "example": {
                "email": "jane@example.com",
                "name": "Jane Doe"
            }
        }


class UserResponse(BaseModel):
    """Schema for user response."""
    id: int = Field(..., description="Unique user identifier", examples=[1])
    email: str = Field(..., description="User email address", examples=["jane@example.com"])
    name: str = Field(..., description="Display name", examples=["Jane Doe"])
    created_at: str = Field(..., description="ISO 8601 UTC creation timestamp", examples=["2026-01-01T10:00:00Z"])

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": 1,
                "email": "jane@example.com",
                "name": "Jane Doe",
                "created_at": "2026-01-01T10:00:00Z"
            }
        }
