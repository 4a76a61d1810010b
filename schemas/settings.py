"""
Pydantic schemas for threshold and emergency contact settings.
"""
from typing import List

from pydantic import BaseModel, Field

from models.settings import BpThreshold, SugarThreshold, ThresholdRules


class BpThresholdSchema(BaseModel):
    """Inclusive blood pressure range in mmHg."""
    min_systolic: int = Field(..., ge=0, examples=[90])
    max_systolic: int = Field(..., ge=0, examples=[140])
    min_diastolic: int = Field(..., ge=0, examples=[60])
    max_diastolic: int = Field(..., ge=0, examples=[90])


class SugarThresholdSchema(BaseModel):
    """Inclusive blood sugar range in mg/dL."""
    min: int = Field(..., ge=0, examples=[70])
    max: int = Field(..., ge=0, examples=[100])


class ThresholdsPayload(BaseModel):
    """Schema for reading and replacing a user's threshold rules.

    Each minimum must not exceed its maximum; violations are rejected with 400.
    """
    bp: BpThresholdSchema
    fasting: SugarThresholdSchema
    after_meal: SugarThresholdSchema

    def to_rules(self) -> ThresholdRules:
        """
        Raises:
            InvalidThresholdError: If a minimum is above its maximum.
        """
        return ThresholdRules(
            bp=BpThreshold(**self.bp.model_dump()),
            fasting=SugarThreshold(**self.fasting.model_dump()),
            after_meal=SugarThreshold(**self.after_meal.model_dump()),
        )

    @classmethod
    def from_rules(cls, rules: ThresholdRules) -> "ThresholdsPayload":
        return cls(**rules.to_dict())

    class Config:
        json_schema_extra = {
            "example": {
                "bp": {"min_systolic": 90, "max_systolic": 140, "min_diastolic": 60, "max_diastolic": 90},
                "fasting": {"min": 70, "max": 100},
                "after_meal": {"min": 70, "max": 140}
            }
        }


class EmergencyAlertsSetting(BaseModel):
    """Whether out-of-range readings email the emergency contacts."""
    emergency_alerts_enabled: bool = Field(
        ...,
        description="When false, out-of-range readings only raise a local notification",
        examples=[True]
    )


class ContactCreate(BaseModel):
    """Schema for adding an emergency contact."""
    email: str = Field(
        ...,
        max_length=254,
        description="Contact email address",
        examples=["brother@example.com"]
    )


class ContactsResponse(BaseModel):
    """A user's emergency contacts, in the order they were added."""
    user_id: int
    emergency_contacts: List[str] = Field(default_factory=list, examples=[["brother@example.com"]])
