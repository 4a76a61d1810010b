"""
Pydantic schemas for alert history and local notifications.
"""
from typing import List, Optional

from pydantic import BaseModel, Field


class AlertResponse(BaseModel):
    """One attempted emergency email."""
    id: int
    user_id: int
    reading_id: str
    recipients: List[str]
    subject: str
    body: str
    status: str = Field(..., description="'sent' or 'failed'", examples=["sent"])
    reason: Optional[str] = Field(None, description="Failure reason, if any")
    sent_at: str = Field(..., description="ISO 8601 UTC timestamp", examples=["2026-10-19T21:05:03Z"])

    class Config:
        from_attributes = True


class AlertStatsResponse(BaseModel):
    """Alert counts and delivery rate for a user."""
    total: int = Field(..., examples=[4])
    sent: int = Field(..., examples=[3])
    failed: int = Field(..., examples=[1])
    delivery_rate: int = Field(..., description="Sent / total as a rounded percentage", examples=[75])


class NotificationResponse(BaseModel):
    """A queued local notification."""
    id: str = Field(..., examples=["vital-alert-5f0c6d2e9b8a4c1d8e7f6a5b4c3d2e1f"])
    title: str = Field(..., examples=["Blood Pressure Out of Range"])
    body: str
    created_at: str
