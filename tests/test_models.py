"""
Tests for domain model construction and validation.
"""
from datetime import date, datetime, time

import pytest

from core.exceptions import InvalidMeasurementError, InvalidThresholdError
from models.alert import AlertRecord, AlertStatus, EmailDeliveryRequest, notification_id_for
from models.measurement import BloodPressure, BloodSugar, ReadingContext
from models.outcome import (
    DeliveryResult,
    DeliveryStatus,
    DispatchOutcome,
    DispatchState,
    NotificationResult,
    NotificationStatus,
    SkipReason,
)
from models.settings import BpThreshold, SugarThreshold, ThresholdRules
from models.verdict import OutOfRange

DAY = date(2026, 10, 19)
AT = time(9, 15)


class TestMeasurement:
    def test_blood_pressure_requires_both_values(self):
        with pytest.raises(InvalidMeasurementError) as exc_info:
            BloodPressure(user_id=1, reading_date=DAY, reading_time=AT, systolic=120, diastolic=None)

        assert exc_info.value.context["field"] == "diastolic"

    @pytest.mark.parametrize("value", [0, -5, 120.5, "120", True])
    def test_blood_pressure_rejects_non_positive_or_non_int(self, value):
        with pytest.raises(InvalidMeasurementError):
            BloodPressure(user_id=1, reading_date=DAY, reading_time=AT, systolic=value, diastolic=80)

    def test_sugar_without_context_is_rejected(self):
        with pytest.raises(InvalidMeasurementError) as exc_info:
            BloodSugar(user_id=1, reading_date=DAY, reading_time=AT, level=95, reading_context=None)

        assert exc_info.value.context["field"] == "reading_context"

    def test_sugar_context_string_is_coerced(self):
        reading = BloodSugar(user_id=1, reading_date=DAY, reading_time=AT, level=95, reading_context="after_meal")

        assert reading.reading_context is ReadingContext.AFTER_MEAL

    def test_sugar_unknown_context_is_rejected(self):
        with pytest.raises(InvalidMeasurementError):
            BloodSugar(user_id=1, reading_date=DAY, reading_time=AT, level=95, reading_context="bedtime")

    def test_reading_date_must_be_a_date(self):
        with pytest.raises(InvalidMeasurementError):
            BloodPressure(user_id=1, reading_date=datetime(2026, 10, 19, 9, 15), reading_time=AT,
                          systolic=120, diastolic=80)

    def test_missing_user_id_is_rejected(self):
        with pytest.raises(InvalidMeasurementError):
            BloodPressure(user_id=None, reading_date=DAY, reading_time=AT, systolic=120, diastolic=80)

    def test_each_reading_gets_its_own_id(self):
        first = BloodPressure(user_id=1, reading_date=DAY, reading_time=AT, systolic=120, diastolic=80)
        second = BloodPressure(user_id=1, reading_date=DAY, reading_time=AT, systolic=120, diastolic=80)

        assert first.id != second.id

    def test_readings_are_immutable(self):
        reading = BloodPressure(user_id=1, reading_date=DAY, reading_time=AT, systolic=120, diastolic=80)

        with pytest.raises(AttributeError):
            reading.systolic = 200

    def test_with_updates_keeps_id_and_revalidates(self):
        reading = BloodPressure(user_id=1, reading_date=DAY, reading_time=AT, systolic=120, diastolic=80)

        updated = reading.with_updates(systolic=130)
        assert updated.id == reading.id
        assert updated.systolic == 130
        assert reading.systolic == 120

        with pytest.raises(InvalidMeasurementError):
            reading.with_updates(diastolic=0)

    def test_labels_come_from_registry(self):
        bp = BloodPressure(user_id=1, reading_date=DAY, reading_time=AT, systolic=120, diastolic=80)
        sugar = BloodSugar(user_id=1, reading_date=DAY, reading_time=AT, level=95,
                           reading_context=ReadingContext.FASTING)

        assert bp.type_label == "Blood Pressure"
        assert bp.vital.unit == "mmHg"
        assert sugar.type_label == "Blood Sugar"
        assert sugar.vital.unit == "mg/dL"


class TestThresholds:
    def test_min_above_max_is_rejected(self):
        with pytest.raises(InvalidThresholdError):
            BpThreshold(min_systolic=150, max_systolic=140, min_diastolic=60, max_diastolic=90)

        with pytest.raises(InvalidThresholdError):
            SugarThreshold(min=120, max=100)

    def test_equal_bounds_are_allowed(self):
        assert SugarThreshold(min=100, max=100).to_dict() == {"min": 100, "max": 100}

    def test_sugar_for_selects_by_context(self):
        rules = ThresholdRules.defaults()

        assert rules.sugar_for(ReadingContext.FASTING) is rules.fasting
        assert rules.sugar_for(ReadingContext.AFTER_MEAL) is rules.after_meal

        with pytest.raises(ValueError):
            rules.sugar_for(None)


class TestVerdictAndOutcome:
    def test_out_of_range_requires_a_violation(self):
        with pytest.raises(ValueError):
            OutOfRange(formatted_value="120/80 mmHg", violations=())

    def test_skipped_no_contacts_is_contacts_missing(self):
        outcome = DispatchOutcome.skipped(SkipReason.NO_CONTACTS)

        assert outcome.state is DispatchState.CONTACTS_MISSING
        assert outcome.contacts_missing is True
        assert outcome.succeeded is False
        assert outcome.to_dict() == {"state": "contacts_missing", "skip_reason": "no_contacts"}

    def test_skipped_in_range(self):
        outcome = DispatchOutcome.skipped(SkipReason.IN_RANGE)

        assert outcome.state is DispatchState.SKIPPED
        assert outcome.contacts_missing is False

    def test_done_reports_both_steps(self):
        request = EmailDeliveryRequest(to=("a@example.com",), subject="s", body="b")
        outcome = DispatchOutcome.done(
            request=request,
            delivery=DeliveryResult(DeliveryStatus.FAILED, reason="relay down"),
            notification=NotificationResult(NotificationStatus.ENQUEUED, notification_id_for("r1")),
        )

        assert outcome.succeeded is False
        assert outcome.to_dict() == {
            "state": "done",
            "delivery": {"status": "failed", "reason": "relay down"},
            "notification": {"status": "enqueued", "notification_id": "vital-alert-r1", "reason": None},
        }


def test_email_payload_shape():
    request = EmailDeliveryRequest(to=("a@example.com", "b@example.com"), subject="Alert", body="Body")

    assert request.to_payload() == {
        "to": ["a@example.com", "b@example.com"],
        "subject": "Alert",
        "body": "Body",
    }


def test_alert_record_from_row():
    row = (3, 1, "r1", '["a@example.com"]', "Subject", "Body", "failed", "Email relay error 500", "2026-10-19 21:05:03")

    record = AlertRecord.from_row(row)

    assert record.recipients == ("a@example.com",)
    assert record.status is AlertStatus.FAILED
    assert record.to_dict()["sent_at"] == "2026-10-19T21:05:03Z"
