"""
Tests for the SQLite repositories.
"""
from datetime import date, time

import pytest

from models.alert import AlertStatus, EmailDeliveryRequest, LocalNotification
from models.measurement import BloodPressure, BloodSugar, ReadingContext
from models.settings import BpThreshold, SugarThreshold, ThresholdRules


@pytest.fixture
def user(user_repo):
    return user_repo.add("jane@example.com", "Jane Doe")


class TestUserRepository:
    def test_add_and_get(self, user_repo):
        created = user_repo.add("jane@example.com", "Jane Doe")

        assert created.id is not None
        assert user_repo.get_by_id(created.id).email == "jane@example.com"

    def test_duplicate_email_returns_none(self, user_repo):
        user_repo.add("jane@example.com", "Jane Doe")

        assert user_repo.add("jane@example.com", "Someone Else") is None

    def test_get_all_sorted_by_name(self, user_repo):
        user_repo.add("zoe@example.com", "Zoe")
        user_repo.add("adam@example.com", "Adam")

        assert [u.name for u in user_repo.get_all()] == ["Adam", "Zoe"]

    def test_missing_user(self, user_repo):
        assert user_repo.get_by_id(999) is None


class TestReadingRepository:
    def test_round_trip_of_both_kinds(self, reading_repo, user):
        bp = BloodPressure(user_id=user.id, reading_date=date(2026, 10, 19), reading_time=time(21, 5),
                           systolic=150, diastolic=95)
        sugar = BloodSugar(user_id=user.id, reading_date=date(2026, 10, 19), reading_time=time(7, 30),
                           level=65, reading_context=ReadingContext.FASTING)

        reading_repo.save(bp)
        reading_repo.save(sugar)

        assert reading_repo.get(bp.id) == bp
        assert reading_repo.get(sugar.id) == sugar

    def test_save_same_id_overwrites(self, reading_repo, user):
        reading = BloodPressure(user_id=user.id, reading_date=date(2026, 10, 19), reading_time=time(8, 0),
                                systolic=120, diastolic=80)
        reading_repo.save(reading)
        reading_repo.save(reading.with_updates(systolic=130))

        stored = reading_repo.get_for_user(user.id)
        assert len(stored) == 1
        assert stored[0].systolic == 130

    def test_get_for_user_newest_first_with_filters(self, reading_repo, user):
        older = BloodPressure(user_id=user.id, reading_date=date(2026, 10, 18), reading_time=time(22, 0),
                              systolic=120, diastolic=80)
        newer = BloodPressure(user_id=user.id, reading_date=date(2026, 10, 19), reading_time=time(6, 0),
                              systolic=125, diastolic=82)
        sugar = BloodSugar(user_id=user.id, reading_date=date(2026, 10, 19), reading_time=time(7, 0),
                           level=95, reading_context=ReadingContext.AFTER_MEAL)
        for r in (older, newer, sugar):
            reading_repo.save(r)

        assert [r.id for r in reading_repo.get_for_user(user.id)] == [sugar.id, newer.id, older.id]
        assert [r.id for r in reading_repo.get_for_user(user.id, kind="bp")] == [newer.id, older.id]
        assert [r.id for r in reading_repo.get_for_user(user.id, limit=1)] == [sugar.id]

    def test_delete(self, reading_repo, user):
        reading = BloodPressure(user_id=user.id, reading_date=date(2026, 10, 19), reading_time=time(8, 0),
                                systolic=120, diastolic=80)
        reading_repo.save(reading)

        assert reading_repo.delete(reading.id) is True
        assert reading_repo.delete(reading.id) is False
        assert reading_repo.get(reading.id) is None

    def test_delete_older_than_keeps_cutoff_day(self, reading_repo, user):
        def bp_on(day):
            return BloodPressure(user_id=user.id, reading_date=day, reading_time=time(8, 0),
                                 systolic=120, diastolic=80)

        expired = bp_on(date(2026, 9, 18))
        boundary = bp_on(date(2026, 9, 19))
        recent = bp_on(date(2026, 10, 19))
        for r in (expired, boundary, recent):
            reading_repo.save(r)

        assert reading_repo.delete_older_than(date(2026, 9, 19)) == 1
        assert {r.id for r in reading_repo.get_for_user(user.id)} == {boundary.id, recent.id}


class TestSettingsRepository:
    def test_first_access_creates_defaults(self, settings_repo, user):
        thresholds, contacts, alerts_enabled = settings_repo.get_or_create(user.id)

        assert thresholds == ThresholdRules.defaults()
        assert contacts == ()
        assert alerts_enabled is True
        assert settings_repo.get_or_create(user.id) == (thresholds, (), True)

    def test_update_thresholds_and_contacts(self, settings_repo, user):
        settings_repo.get_or_create(user.id)
        rules = ThresholdRules(
            bp=BpThreshold(95, 130, 65, 85),
            fasting=SugarThreshold(75, 105),
            after_meal=SugarThreshold(80, 150),
        )

        settings_repo.update_thresholds(user.id, rules)
        settings_repo.update_contacts(user.id, ["b@example.com", "a@example.com"])

        assert settings_repo.get_or_create(user.id) == (rules, ("b@example.com", "a@example.com"), True)

    def test_update_emergency_alerts(self, settings_repo, user):
        settings_repo.get_or_create(user.id)

        settings_repo.update_emergency_alerts(user.id, False)
        assert settings_repo.get_or_create(user.id)[2] is False

        settings_repo.update_emergency_alerts(user.id, True)
        assert settings_repo.get_or_create(user.id)[2] is True


class TestAlertRepository:
    def test_record_and_list(self, alert_repo, user):
        request = EmailDeliveryRequest(to=("a@example.com",), subject="Alert", body="Body")

        first = alert_repo.record(user.id, "r1", request, AlertStatus.SENT)
        second = alert_repo.record(user.id, "r2", request, AlertStatus.FAILED, reason="Email relay error 500")

        history = alert_repo.get_for_user(user.id)
        assert [a.id for a in history] == [second.id, first.id]
        assert history[0].reason == "Email relay error 500"
        assert history[1].recipients == ("a@example.com",)
        assert len(alert_repo.get_for_user(user.id, limit=1)) == 1

    def test_count_by_status(self, alert_repo, user):
        request = EmailDeliveryRequest(to=("a@example.com",), subject="Alert", body="Body")
        assert alert_repo.count_by_status(user.id) == {"sent": 0, "failed": 0}

        alert_repo.record(user.id, "r1", request, AlertStatus.SENT)
        alert_repo.record(user.id, "r2", request, AlertStatus.SENT)
        alert_repo.record(user.id, "r3", request, AlertStatus.FAILED)

        assert alert_repo.count_by_status(user.id) == {"sent": 2, "failed": 1}


class TestNotificationRepository:
    def test_upsert_is_keyed_by_id(self, notification_repo, user):
        notification = LocalNotification(id="vital-alert-r1", title="Blood Pressure Out of Range", body="first")

        assert notification_repo.upsert(user.id, notification) is True
        assert notification_repo.upsert(
            user.id, LocalNotification(id="vital-alert-r1", title=notification.title, body="second")
        ) is False

        stored = notification_repo.get_for_user(user.id)
        assert len(stored) == 1
        assert stored[0]["body"] == "second"
