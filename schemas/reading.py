"""
Pydantic schemas for vital reading API operations.

The create body is a discriminated union on ``kind``:

    {"kind": "bp", "systolic": 150, "diastolic": 95, ...}
    {"kind": "sugar", "level": 65, "reading_context": "fasting", ...}
"""
from datetime import date, time
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from models.measurement import BloodPressure, BloodSugar, Measurement, ReadingContext
from services.threshold_evaluator import format_value
from services.vitals_service import ReadingResult


class _ReadingCreateBase(BaseModel):
    reading_date: date = Field(
        ...,
        description="Calendar date the reading was taken",
        examples=["2026-10-19"]
    )
    reading_time: time = Field(
        ...,
        description="Time of day the reading was taken",
        examples=["21:05"]
    )


class BloodPressureCreate(_ReadingCreateBase):
    """Schema for logging a blood pressure reading (mmHg)."""
    kind: Literal["bp"] = "bp"
    systolic: int = Field(..., gt=0, description="Systolic pressure in mmHg", examples=[120])
    diastolic: int = Field(..., gt=0, description="Diastolic pressure in mmHg", examples=[80])

    def to_measurement(self, user_id: int) -> BloodPressure:
        return BloodPressure(
            user_id=user_id,
            reading_date=self.reading_date,
            reading_time=self.reading_time,
            systolic=self.systolic,
            diastolic=self.diastolic,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "kind": "bp",
                "reading_date": "2026-10-19",
                "reading_time": "21:05",
                "systolic": 150,
                "diastolic": 95
            }
        }


class BloodSugarCreate(_ReadingCreateBase):
    """Schema for logging a blood sugar reading (mg/dL)."""
    kind: Literal["sugar"] = "sugar"
    level: int = Field(..., gt=0, description="Blood sugar level in mg/dL", examples=[95])
    reading_context: ReadingContext = Field(
        ...,
        description="Whether the reading was taken fasting or after a meal",
        examples=["fasting"]
    )

    def to_measurement(self, user_id: int) -> BloodSugar:
        return BloodSugar(
            user_id=user_id,
            reading_date=self.reading_date,
            reading_time=self.reading_time,
            level=self.level,
            reading_context=self.reading_context,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "kind": "sugar",
                "reading_date": "2026-10-19",
                "reading_time": "07:30",
                "level": 65,
                "reading_context": "fasting"
            }
        }


ReadingCreate = Annotated[
    Union[BloodPressureCreate, BloodSugarCreate],
    Field(discriminator="kind"),
]


def _reading_fields(reading: Measurement) -> Dict[str, Any]:
    fields: Dict[str, Any] = {
        "id": reading.id,
        "user_id": reading.user_id,
        "kind": reading.kind,
        "reading_date": reading.reading_date.isoformat(),
        "reading_time": reading.reading_time.isoformat(timespec="seconds"),
        "formatted_value": format_value(reading),
    }
    if isinstance(reading, BloodPressure):
        fields["systolic"] = reading.systolic
        fields["diastolic"] = reading.diastolic
    elif isinstance(reading, BloodSugar):
        fields["level"] = reading.level
        fields["reading_context"] = reading.reading_context.value
    return fields


class ReadingResponse(BaseModel):
    """A stored vital reading."""
    id: str = Field(..., description="Reading identifier")
    user_id: int
    kind: str = Field(..., examples=["bp"])
    reading_date: str = Field(..., examples=["2026-10-19"])
    reading_time: str = Field(..., examples=["21:05:00"])
    systolic: Optional[int] = None
    diastolic: Optional[int] = None
    level: Optional[int] = None
    reading_context: Optional[str] = None
    formatted_value: str = Field(..., examples=["150/95 mmHg"])

    @classmethod
    def from_measurement(cls, reading: Measurement) -> "ReadingResponse":
        return cls(**_reading_fields(reading))


class ReadingLogResponse(ReadingResponse):
    """A newly logged reading together with its evaluation and alert outcome."""
    out_of_range: bool
    violations: List[str] = Field(default_factory=list, examples=[["systolic_high", "diastolic_high"]])
    contacts_missing: bool = Field(
        False,
        description="True when the reading was out of range but the user has no emergency contacts"
    )
    dispatch: Dict[str, Any] = Field(..., description="Alert dispatch outcome")

    @classmethod
    def from_result(cls, result: ReadingResult) -> "ReadingLogResponse":
        verdict = result.verdict
        return cls(
            **_reading_fields(result.reading),
            out_of_range=verdict.is_out_of_range,
            violations=[v.value for v in getattr(verdict, "violations", ())],
            contacts_missing=result.outcome.contacts_missing,
            dispatch=result.outcome.to_dict(),
        )

    class Config:
        json_schema_extra = {
            "example": {
                "id": "5f0c6d2e9b8a4c1d8e7f6a5b4c3d2e1f",
                "user_id": 1,
                "kind": "bp",
                "reading_date": "2026-10-19",
                "reading_time": "21:05:00",
                "systolic": 150,
                "diastolic": 95,
                "level": None,
                "reading_context": None,
                "formatted_value": "150/95 mmHg",
                "out_of_range": True,
                "violations": ["systolic_high", "diastolic_high"],
                "contacts_missing": False,
                "dispatch": {
                    "state": "done",
                    "delivery": {"status": "sent", "reason": None},
                    "notification": {
                        "status": "enqueued",
                        "notification_id": "vital-alert-5f0c6d2e9b8a4c1d8e7f6a5b4c3d2e1f",
                        "reason": None
                    }
                }
            }
        }


class PurgeResponse(BaseModel):
    """Result of a retention sweep."""
    deleted: int = Field(..., ge=0, description="Number of readings removed", examples=[12])
    retention_days: int = Field(..., description="Retention window in days", examples=[30])
