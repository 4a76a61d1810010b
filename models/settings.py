"""
Per-user alert settings: threshold rules and emergency contacts.

The evaluator and dispatcher only ever see an immutable UserSettings snapshot;
edits go through SettingsService and produce a new snapshot.
"""
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from core.exceptions import InvalidThresholdError
from core.vital_registry import get_default_range
from models.measurement import ReadingContext


def _check_bounds(name: str, low: Any, high: Any) -> None:
    if type(low) is not int or type(high) is not int:
        raise InvalidThresholdError(f"{name} bounds must be integers", rule=name)
    if low > high:
        raise InvalidThresholdError(
            f"{name} minimum ({low}) is greater than maximum ({high})", rule=name
        )


@dataclass(frozen=True)
class BpThreshold:
    """Inclusive normal range for systolic and diastolic pressure (mmHg)."""

    min_systolic: int
    max_systolic: int
    min_diastolic: int
    max_diastolic: int

    def __post_init__(self) -> None:
        _check_bounds("Systolic", self.min_systolic, self.max_systolic)
        _check_bounds("Diastolic", self.min_diastolic, self.max_diastolic)

    @classmethod
    def default(cls) -> "BpThreshold":
        min_sys, max_sys = get_default_range("bp", "systolic")
        min_dia, max_dia = get_default_range("bp", "diastolic")
        return cls(min_sys, max_sys, min_dia, max_dia)

    def to_dict(self) -> Dict[str, int]:
        return {
            "min_systolic": self.min_systolic,
            "max_systolic": self.max_systolic,
            "min_diastolic": self.min_diastolic,
            "max_diastolic": self.max_diastolic,
        }


@dataclass(frozen=True)
class SugarThreshold:
    """Inclusive normal range for blood sugar (mg/dL)."""

    min: int
    max: int

    def __post_init__(self) -> None:
        _check_bounds("Sugar", self.min, self.max)

    def to_dict(self) -> Dict[str, int]:
        return {"min": self.min, "max": self.max}


@dataclass(frozen=True)
class ThresholdRules:
    """The full rule set for one user: one BP rule and one sugar rule per context."""

    bp: BpThreshold
    fasting: SugarThreshold
    after_meal: SugarThreshold

    @classmethod
    def defaults(cls) -> "ThresholdRules":
        """Rules seeded from the vital registry for users without settings."""
        return cls(
            bp=BpThreshold.default(),
            fasting=SugarThreshold(*get_default_range("sugar", "fasting")),
            after_meal=SugarThreshold(*get_default_range("sugar", "after_meal")),
        )

    def sugar_for(self, context: ReadingContext) -> SugarThreshold:
        """Select the sugar rule for a reading context. There is no fallback rule."""
        if context is ReadingContext.FASTING:
            return self.fasting
        if context is ReadingContext.AFTER_MEAL:
            return self.after_meal
        raise ValueError(f"No sugar threshold for reading context {context!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bp": self.bp.to_dict(),
            "fasting": self.fasting.to_dict(),
            "after_meal": self.after_meal.to_dict(),
        }


@dataclass(frozen=True)
class UserSettings:
    """
    Read-only snapshot of everything the alert path needs about a user.

    An empty ``emergency_contacts`` tuple is meaningful: nobody is to be emailed.
    With ``emergency_alerts_enabled`` off, out-of-range readings still raise a
    local notification but no email goes out.
    """

    user_id: int
    display_name: str
    thresholds: ThresholdRules
    emergency_contacts: Tuple[str, ...] = ()
    emergency_alerts_enabled: bool = True
