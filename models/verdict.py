"""
Evaluation results.

A Verdict is either InRange or OutOfRange. OutOfRange lists every bound the
reading broke, in a fixed order; ``rule_violated`` is the first of them.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union


class ViolatedBound(str, Enum):
    """Which threshold bound a reading fell outside of."""

    SYSTOLIC_LOW = "systolic_low"
    SYSTOLIC_HIGH = "systolic_high"
    DIASTOLIC_LOW = "diastolic_low"
    DIASTOLIC_HIGH = "diastolic_high"
    SUGAR_LOW = "sugar_low"
    SUGAR_HIGH = "sugar_high"


@dataclass(frozen=True)
class InRange:
    """The reading is within every bound of its rule."""

    formatted_value: str

    @property
    def is_out_of_range(self) -> bool:
        return False


@dataclass(frozen=True)
class OutOfRange:
    """The reading broke at least one bound of its rule."""

    formatted_value: str
    violations: Tuple[ViolatedBound, ...]

    def __post_init__(self) -> None:
        if not self.violations:
            raise ValueError("OutOfRange requires at least one violated bound")

    @property
    def is_out_of_range(self) -> bool:
        return True

    @property
    def rule_violated(self) -> ViolatedBound:
        return self.violations[0]


Verdict = Union[InRange, OutOfRange]
