"""
Domain model for vital readings.

A Measurement is a tagged union: each variant class carries exactly the fields
its kind needs, and every field is validated at construction. An instance that
exists is always evaluable; there are no optional variant fields to nil-check.

    BloodPressure(user_id=1, reading_date=..., reading_time=..., systolic=120, diastolic=80)
    BloodSugar(user_id=1, reading_date=..., reading_time=..., level=95,
               reading_context=ReadingContext.FASTING)

Instances are frozen. Use ``with_updates(...)`` for an explicit, re-validated edit.
"""
import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, ClassVar, Union

from core.exceptions import InvalidMeasurementError
from core.vital_registry import VitalDefinition, get_vital


class ReadingContext(str, Enum):
    """When a blood sugar reading was taken relative to a meal."""

    FASTING = "fasting"
    AFTER_MEAL = "after_meal"

    @property
    def label(self) -> str:
        """Human-readable context name used in formatted values."""
        return _CONTEXT_LABELS[self]


_CONTEXT_LABELS = {
    ReadingContext.FASTING: "Fasting",
    ReadingContext.AFTER_MEAL: "After Meal",
}


def _new_reading_id() -> str:
    return uuid.uuid4().hex


def _require_int(kind: str, name: str, value: Any) -> None:
    # bool is an int subclass and None means the field was never supplied
    if value is None:
        raise InvalidMeasurementError(
            f"{kind} reading is missing required field '{name}'", field=name
        )
    if type(value) is not int:
        raise InvalidMeasurementError(
            f"{kind} field '{name}' must be an integer, got {type(value).__name__}",
            field=name,
        )
    if value <= 0:
        raise InvalidMeasurementError(
            f"{kind} field '{name}' must be positive, got {value}", field=name
        )


@dataclass(frozen=True, kw_only=True)
class Measurement:
    """Fields shared by every vital reading."""

    kind: ClassVar[str] = ""

    user_id: int
    reading_date: date
    reading_time: time
    id: str = field(default_factory=_new_reading_id)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidMeasurementError("Reading id must be a non-empty string", field="id")
        if type(self.user_id) is not int:
            raise InvalidMeasurementError("Reading must reference an owning user id", field="user_id")
        # datetime is a date subclass; a reading date carries no time component
        if not isinstance(self.reading_date, date) or isinstance(self.reading_date, datetime):
            raise InvalidMeasurementError("Reading is missing a calendar date", field="reading_date")
        if not isinstance(self.reading_time, time):
            raise InvalidMeasurementError("Reading is missing a time of day", field="reading_time")
        self._validate_variant()

    def _validate_variant(self) -> None:
        raise NotImplementedError

    @property
    def vital(self) -> VitalDefinition:
        """Registry entry (label, unit) for this measurement kind."""
        return get_vital(self.kind)

    @property
    def type_label(self) -> str:
        return self.vital.display_name

    def with_updates(self, **changes: Any) -> "Measurement":
        """
        Return a copy with the given fields replaced.

        The copy goes through the same validation as a new reading.
        """
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True, kw_only=True)
class BloodPressure(Measurement):
    """Blood pressure reading in mmHg."""

    kind: ClassVar[str] = "bp"

    systolic: int
    diastolic: int

    def _validate_variant(self) -> None:
        _require_int("Blood pressure", "systolic", self.systolic)
        _require_int("Blood pressure", "diastolic", self.diastolic)


@dataclass(frozen=True, kw_only=True)
class BloodSugar(Measurement):
    """Blood sugar reading in mg/dL, taken fasting or after a meal."""

    kind: ClassVar[str] = "sugar"

    level: int
    reading_context: ReadingContext

    def _validate_variant(self) -> None:
        _require_int("Blood sugar", "level", self.level)
        context = self.reading_context
        if context is None:
            raise InvalidMeasurementError(
                "Blood sugar reading is missing its reading context (fasting or after meal)",
                field="reading_context",
            )
        if not isinstance(context, ReadingContext):
            try:
                context = ReadingContext(context)
            except ValueError:
                raise InvalidMeasurementError(
                    f"Unknown blood sugar reading context: {context!r}",
                    field="reading_context",
                ) from None
            object.__setattr__(self, "reading_context", context)


VitalReading = Union[BloodPressure, BloodSugar]
