"""
Shared pytest fixtures.

Fixture Hierarchy:
    temp_db → repositories → services → test_app → client

The email relay is never reached over the network: the EmailRelayClient is
built on an httpx.MockTransport whose behaviour each test can change through
the ``relay`` fixture.
"""
import os
import tempfile
from datetime import date, time
from typing import Callable, List

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from repositories.base import Database
from repositories import (
    UserRepository,
    ReadingRepository,
    SettingsRepository,
    AlertRepository,
    NotificationRepository,
)
from clients.email_relay_client import EmailRelayClient
from services import (
    AlertCheckService,
    AlertDispatcher,
    AlertHistoryService,
    InMemoryNotificationSink,
    NoContactsSignal,
    RepositoryNotificationSink,
    SettingsService,
    UserService,
    VitalsService,
)
from models.measurement import BloodPressure, BloodSugar, ReadingContext
from models.settings import BpThreshold, SugarThreshold, ThresholdRules, UserSettings
from core.exceptions import setup_exception_handlers
from core import dependencies as deps

TEST_RELAY_URL = "http://relay.test"
TEST_APP_NAME = "HealthMate"


class FakeRelay:
    """
    Programmable stand-in for the email relay.

    Records every request it receives and answers with ``status_code``, or
    raises ``error`` when one is set.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.error: Exception = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json={"ok": self.status_code == 200})

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def temp_db():
    """Fresh SQLite database in a temp file for each test."""
    fd, db_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    db = Database(db_path=db_path)
    yield db

    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(db_path + suffix):
            os.unlink(db_path + suffix)


@pytest.fixture
def user_repo(temp_db):
    return UserRepository(db=temp_db)


@pytest.fixture
def reading_repo(temp_db):
    return ReadingRepository(db=temp_db)


@pytest.fixture
def settings_repo(temp_db):
    return SettingsRepository(db=temp_db)


@pytest.fixture
def alert_repo(temp_db):
    return AlertRepository(db=temp_db)


@pytest.fixture
def notification_repo(temp_db):
    return NotificationRepository(db=temp_db)


@pytest.fixture
def relay():
    return FakeRelay()


@pytest.fixture
def email_client(relay):
    return EmailRelayClient(
        base_url=TEST_RELAY_URL,
        timeout=5.0,
        transport=httpx.MockTransport(relay.handler)
    )


@pytest.fixture
def memory_sink():
    return InMemoryNotificationSink()


@pytest.fixture
def no_contacts_signal():
    return NoContactsSignal()


@pytest.fixture
def dispatcher(email_client, memory_sink, no_contacts_signal):
    """AlertDispatcher with the mock relay and an in-memory sink."""
    return AlertDispatcher(
        email_client=email_client,
        notification_sink=memory_sink,
        app_name=TEST_APP_NAME,
        no_contacts_signal=no_contacts_signal
    )


@pytest.fixture
def user_service(user_repo):
    return UserService(user_repository=user_repo)


@pytest.fixture
def settings_service(user_repo, settings_repo):
    return SettingsService(user_repository=user_repo, settings_repository=settings_repo)


@pytest.fixture
def vitals_service(settings_service, reading_repo, alert_repo, email_client, notification_repo, no_contacts_signal):
    """VitalsService whose dispatcher stores notifications in the test database."""
    dispatcher = AlertDispatcher(
        email_client=email_client,
        notification_sink=RepositoryNotificationSink(notification_repository=notification_repo),
        app_name=TEST_APP_NAME,
        no_contacts_signal=no_contacts_signal
    )
    return VitalsService(
        settings_service=settings_service,
        reading_repository=reading_repo,
        alert_repository=alert_repo,
        dispatcher=dispatcher,
        retention_days=30
    )


@pytest.fixture
def history_service(user_repo, alert_repo, notification_repo):
    return AlertHistoryService(
        user_repository=user_repo,
        alert_repository=alert_repo,
        notification_repository=notification_repo
    )


@pytest.fixture
def alert_check_service(settings_service, dispatcher, alert_repo):
    return AlertCheckService(
        settings_service=settings_service,
        dispatcher=dispatcher,
        alert_repository=alert_repo
    )


@pytest.fixture
def test_app(temp_db, user_service, settings_service, vitals_service, history_service, alert_check_service):
    """
    FastAPI app using the real routers with test dependencies injected.
    """
    from api.routers import (
        health_router,
        users_router,
        readings_router,
        settings_router,
        alerts_router,
    )

    app = FastAPI(title="Vital Alerts API Test")
    setup_exception_handlers(app)

    app.dependency_overrides[deps.get_database] = lambda: temp_db
    app.dependency_overrides[deps.get_user_service] = lambda: user_service
    app.dependency_overrides[deps.get_settings_service] = lambda: settings_service
    app.dependency_overrides[deps.get_vitals_service] = lambda: vitals_service
    app.dependency_overrides[deps.get_alert_history_service] = lambda: history_service
    app.dependency_overrides[deps.get_alert_check_service] = lambda: alert_check_service

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(readings_router)
    app.include_router(settings_router)
    app.include_router(alerts_router)

    yield app

    app.dependency_overrides.clear()
    deps.reset_database()


@pytest.fixture
def client(test_app):
    return TestClient(test_app)


# =============================================================================
# DOMAIN BUILDERS
# =============================================================================

@pytest.fixture
def make_bp() -> Callable[..., BloodPressure]:
    def _make(systolic: int = 120, diastolic: int = 80, user_id: int = 1, **kwargs) -> BloodPressure:
        kwargs.setdefault("reading_date", date(2026, 10, 19))
        kwargs.setdefault("reading_time", time(21, 5))
        return BloodPressure(user_id=user_id, systolic=systolic, diastolic=diastolic, **kwargs)
    return _make


@pytest.fixture
def make_sugar() -> Callable[..., BloodSugar]:
    def _make(
        level: int = 90,
        context: ReadingContext = ReadingContext.FASTING,
        user_id: int = 1,
        **kwargs
    ) -> BloodSugar:
        kwargs.setdefault("reading_date", date(2026, 10, 19))
        kwargs.setdefault("reading_time", time(7, 30))
        return BloodSugar(user_id=user_id, level=level, reading_context=context, **kwargs)
    return _make


@pytest.fixture
def strict_rules() -> ThresholdRules:
    """BP 90-120 / 60-80, fasting 70-100, after meal 70-140."""
    return ThresholdRules(
        bp=BpThreshold(90, 120, 60, 80),
        fasting=SugarThreshold(70, 100),
        after_meal=SugarThreshold(70, 140),
    )


@pytest.fixture
def make_settings(strict_rules) -> Callable[..., UserSettings]:
    def _make(
        contacts=("brother@example.com",),
        user_id: int = 1,
        name: str = "Jane Doe",
        alerts_enabled: bool = True
    ) -> UserSettings:
        return UserSettings(
            user_id=user_id,
            display_name=name,
            thresholds=strict_rules,
            emergency_contacts=tuple(contacts),
            emergency_alerts_enabled=alerts_enabled,
        )
    return _make
