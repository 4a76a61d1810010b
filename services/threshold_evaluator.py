"""
Threshold evaluation for vital readings.

``evaluate`` is a pure function: it reads a validated measurement and the
user's rule set and returns a Verdict. It never touches storage, the network
or the clock, so it is safe to call from any number of concurrent tasks.

Bounds are inclusive. Every bound is checked; an OutOfRange verdict lists all
of the bounds the reading broke.
"""
import logging
from typing import List

from models.measurement import BloodPressure, BloodSugar, Measurement
from models.settings import BpThreshold, SugarThreshold, ThresholdRules
from models.verdict import InRange, OutOfRange, Verdict, ViolatedBound

logger = logging.getLogger(__name__)


def format_value(measurement: Measurement) -> str:
    """
    Human-readable value of a reading, with its unit.

    Examples:
        "150/95 mmHg"
        "65 mg/dL (Fasting)"
    """
    unit = measurement.vital.unit
    if isinstance(measurement, BloodPressure):
        return f"{measurement.systolic}/{measurement.diastolic} {unit}"
    if isinstance(measurement, BloodSugar):
        return f"{measurement.level} {unit} ({measurement.reading_context.label})"
    raise TypeError(f"Unsupported measurement type: {type(measurement).__name__}")


def _check_blood_pressure(reading: BloodPressure, rule: BpThreshold) -> List[ViolatedBound]:
    violations = []
    if reading.systolic < rule.min_systolic:
        violations.append(ViolatedBound.SYSTOLIC_LOW)
    if reading.systolic > rule.max_systolic:
        violations.append(ViolatedBound.SYSTOLIC_HIGH)
    if reading.diastolic < rule.min_diastolic:
        violations.append(ViolatedBound.DIASTOLIC_LOW)
    if reading.diastolic > rule.max_diastolic:
        violations.append(ViolatedBound.DIASTOLIC_HIGH)
    return violations


def _check_blood_sugar(reading: BloodSugar, rule: SugarThreshold) -> List[ViolatedBound]:
    violations = []
    if reading.level < rule.min:
        violations.append(ViolatedBound.SUGAR_LOW)
    if reading.level > rule.max:
        violations.append(ViolatedBound.SUGAR_HIGH)
    return violations


def evaluate(measurement: Measurement, rules: ThresholdRules) -> Verdict:
    """
    Compare a reading against the user's threshold rules.

    Blood sugar is always judged by the rule for its own reading context
    (fasting or after meal); there is no shared or fallback sugar rule.

    Args:
        measurement: A constructed (and therefore validated) reading.
        rules: The owning user's threshold rules.

    Returns:
        InRange, or OutOfRange with the formatted value and violated bounds.
    """
    if isinstance(measurement, BloodPressure):
        violations = _check_blood_pressure(measurement, rules.bp)
    elif isinstance(measurement, BloodSugar):
        violations = _check_blood_sugar(measurement, rules.sugar_for(measurement.reading_context))
    else:
        raise TypeError(f"Unsupported measurement type: {type(measurement).__name__}")

    formatted = format_value(measurement)
    if not violations:
        return InRange(formatted_value=formatted)

    logger.debug(
        "Reading out of range",
        extra={
            "reading_id": measurement.id,
            "value": formatted,
            "violations": [v.value for v in violations],
        }
    )
    return OutOfRange(formatted_value=formatted, violations=tuple(violations))
