"""
Tests for AlertDispatcher.

The relay is an httpx.MockTransport (see conftest.FakeRelay); the notification
sink is the in-memory sink unless a test needs it to fail.
"""
import asyncio
import json

import httpx
import pytest
from unittest.mock import AsyncMock, Mock

from models.alert import LocalNotification
from models.measurement import ReadingContext
from models.outcome import DeliveryStatus, DispatchState, NotificationStatus, SkipReason
from services import AlertDispatcher, evaluate
from services.notification_sink import NotificationSink, RepositoryNotificationSink
from core.exceptions import NotificationSinkError

TEST_APP_NAME = "HealthMate"
TEST_RELAY_URL = "http://relay.test"


class RecordingSink(NotificationSink):
    """Sink that records call order against the relay and can be told to fail."""

    def __init__(self, relay, error: Exception = None):
        self.relay = relay
        self.error = error
        self.relay_calls_at_enqueue = []

    async def enqueue(self, notification: LocalNotification, *, user_id: int) -> None:
        self.relay_calls_at_enqueue.append(self.relay.call_count)
        if self.error is not None:
            raise self.error


async def _dispatch(dispatcher, reading, rules, user_settings):
    return await dispatcher.dispatch(reading, evaluate(reading, rules), user_settings)


@pytest.mark.asyncio
async def test_in_range_reading_is_skipped(dispatcher, relay, memory_sink, make_bp, strict_rules, make_settings):
    outcome = await _dispatch(dispatcher, make_bp(110, 70), strict_rules, make_settings())

    assert outcome.state is DispatchState.SKIPPED
    assert outcome.skip_reason is SkipReason.IN_RANGE
    assert relay.call_count == 0
    assert memory_sink.enqueue_calls == 0


@pytest.mark.asyncio
async def test_no_contacts_makes_no_http_call(
    dispatcher, relay, memory_sink, no_contacts_signal, make_bp, strict_rules, make_settings
):
    listener = Mock()
    no_contacts_signal.connect(listener)

    outcome = await _dispatch(dispatcher, make_bp(150, 95), strict_rules, make_settings(contacts=()))

    assert outcome.state is DispatchState.CONTACTS_MISSING
    assert outcome.skip_reason is SkipReason.NO_CONTACTS
    assert outcome.contacts_missing is True
    assert relay.call_count == 0
    assert memory_sink.enqueue_calls == 0
    listener.assert_called_once_with(1)


@pytest.mark.asyncio
async def test_out_of_range_sends_email_then_notifies(
    dispatcher, relay, memory_sink, make_bp, strict_rules, make_settings
):
    reading = make_bp(150, 95)
    settings = make_settings(contacts=("brother@example.com", "doctor@example.com"))

    outcome = await _dispatch(dispatcher, reading, strict_rules, settings)

    assert outcome.state is DispatchState.DONE
    assert outcome.delivery.status is DeliveryStatus.SENT
    assert outcome.notification.status is NotificationStatus.ENQUEUED
    assert outcome.succeeded is True

    assert relay.call_count == 1
    sent = relay.requests[0]
    assert str(sent.url) == f"{TEST_RELAY_URL}/send-email"
    assert sent.method == "POST"
    assert sent.headers["content-type"] == "application/json"

    payload = json.loads(sent.content)
    assert payload["to"] == ["brother@example.com", "doctor@example.com"]
    assert payload["subject"] == f"{TEST_APP_NAME} Out-of-Range Vital Reading for Jane Doe"
    assert "- Type: Blood Pressure" in payload["body"]
    assert "- Value: 150/95 mmHg" in payload["body"]
    assert "- Time: 09:05 PM" in payload["body"]
    assert "- Date: 2026-10-19" in payload["body"]

    assert [n.id for n in memory_sink.notifications] == [f"vital-alert-{reading.id}"]
    assert memory_sink.notifications[0].title == "Blood Pressure Out of Range"


@pytest.mark.asyncio
async def test_sugar_alert_email_body(dispatcher, relay, make_sugar, strict_rules, make_settings):
    await _dispatch(dispatcher, make_sugar(65, ReadingContext.FASTING), strict_rules, make_settings())

    body = json.loads(relay.requests[0].content)["body"]
    assert "has logged a blood sugar reading outside their normal range" in body
    assert "- Value: 65 mg/dL (Fasting)" in body


@pytest.mark.asyncio
async def test_relay_500_still_notifies(dispatcher, relay, memory_sink, make_bp, strict_rules, make_settings):
    relay.status_code = 500

    outcome = await _dispatch(dispatcher, make_bp(150, 95), strict_rules, make_settings())

    assert outcome.state is DispatchState.DONE
    assert outcome.delivery.status is DeliveryStatus.FAILED
    assert "500" in outcome.delivery.reason
    assert outcome.notification.status is NotificationStatus.ENQUEUED
    assert memory_sink.enqueue_calls == 1
    assert outcome.succeeded is False


@pytest.mark.asyncio
async def test_non_200_success_code_is_a_failure(dispatcher, relay, make_bp, strict_rules, make_settings):
    relay.status_code = 202

    outcome = await _dispatch(dispatcher, make_bp(150, 95), strict_rules, make_settings())

    assert outcome.delivery.status is DeliveryStatus.FAILED


@pytest.mark.asyncio
async def test_transport_error_still_notifies(dispatcher, relay, memory_sink, make_bp, strict_rules, make_settings):
    relay.error = httpx.ConnectError("connection refused")

    outcome = await _dispatch(dispatcher, make_bp(150, 95), strict_rules, make_settings())

    assert outcome.delivery.status is DeliveryStatus.FAILED
    assert "connection refused" in outcome.delivery.reason
    assert outcome.notification.status is NotificationStatus.ENQUEUED
    assert memory_sink.enqueue_calls == 1


@pytest.mark.asyncio
async def test_serialization_failure_is_reported(
    dispatcher, relay, memory_sink, make_bp, strict_rules, make_settings, monkeypatch
):
    original = dispatcher.build_email

    def build_unserializable(*args, **kwargs):
        request = original(*args, **kwargs)
        # bytes are not JSON-serializable
        return type(request)(to=request.to, subject=request.subject, body=request.body.encode())

    monkeypatch.setattr(dispatcher, "build_email", build_unserializable)

    outcome = await _dispatch(dispatcher, make_bp(150, 95), strict_rules, make_settings())

    assert outcome.delivery.status is DeliveryStatus.SERIALIZATION_FAILED
    assert relay.call_count == 0
    assert outcome.notification.status is NotificationStatus.ENQUEUED


@pytest.mark.asyncio
async def test_notification_runs_after_delivery_attempt(relay, email_client, make_bp, strict_rules, make_settings):
    relay.status_code = 503
    sink = RecordingSink(relay)
    dispatcher = AlertDispatcher(email_client=email_client, notification_sink=sink, app_name=TEST_APP_NAME)

    await _dispatch(dispatcher, make_bp(150, 95), strict_rules, make_settings())

    assert sink.relay_calls_at_enqueue == [1]


@pytest.mark.asyncio
async def test_sink_failure_is_reported_not_raised(relay, email_client, make_bp, strict_rules, make_settings):
    sink = RecordingSink(relay, error=NotificationSinkError("queue full"))
    dispatcher = AlertDispatcher(email_client=email_client, notification_sink=sink, app_name=TEST_APP_NAME)

    outcome = await _dispatch(dispatcher, make_bp(150, 95), strict_rules, make_settings())

    assert outcome.delivery.status is DeliveryStatus.SENT
    assert outcome.notification.status is NotificationStatus.FAILED
    assert outcome.notification.reason == "queue full"
    assert outcome.succeeded is False


@pytest.mark.asyncio
async def test_unexpected_client_error_is_reported(memory_sink, make_bp, strict_rules, make_settings):
    email_client = Mock()
    email_client.send_email = AsyncMock(side_effect=RuntimeError("boom"))
    dispatcher = AlertDispatcher(email_client=email_client, notification_sink=memory_sink, app_name=TEST_APP_NAME)

    outcome = await _dispatch(dispatcher, make_bp(150, 95), strict_rules, make_settings())

    assert outcome.delivery.status is DeliveryStatus.FAILED
    assert outcome.delivery.reason == "boom"
    assert memory_sink.enqueue_calls == 1


@pytest.mark.asyncio
async def test_dispatch_twice_keeps_one_notification(
    dispatcher, memory_sink, make_bp, strict_rules, make_settings
):
    reading = make_bp(150, 95)
    settings = make_settings()

    first = await _dispatch(dispatcher, reading, strict_rules, settings)
    second = await _dispatch(dispatcher, reading, strict_rules, settings)

    assert first.notification.notification_id == second.notification.notification_id
    assert len(memory_sink.notifications) == 1


@pytest.mark.asyncio
async def test_dispatch_does_not_touch_settings(dispatcher, make_bp, strict_rules, make_settings):
    settings = make_settings()
    before = (settings.emergency_contacts, settings.thresholds.to_dict())

    await _dispatch(dispatcher, make_bp(150, 95), strict_rules, settings)

    assert (settings.emergency_contacts, settings.thresholds.to_dict()) == before


@pytest.mark.asyncio
async def test_missing_relay_still_notifies(memory_sink, make_bp, strict_rules, make_settings):
    dispatcher = AlertDispatcher(email_client=None, notification_sink=memory_sink, app_name=TEST_APP_NAME)
    reading = make_bp(150, 95)

    outcome = await _dispatch(dispatcher, reading, strict_rules, make_settings())

    assert outcome.state is DispatchState.DONE
    assert outcome.delivery.status is DeliveryStatus.FAILED
    assert outcome.delivery.reason == "email relay not configured"
    assert outcome.notification.status is NotificationStatus.ENQUEUED
    assert [n.id for n in memory_sink.notifications] == [f"vital-alert-{reading.id}"]


@pytest.mark.asyncio
async def test_alerts_off_skips_email_but_notifies(
    dispatcher, relay, memory_sink, no_contacts_signal, make_bp, strict_rules, make_settings
):
    listener = Mock()
    no_contacts_signal.connect(listener)

    for contacts in (("brother@example.com",), ()):
        outcome = await _dispatch(
            dispatcher, make_bp(150, 95), strict_rules, make_settings(contacts=contacts, alerts_enabled=False)
        )

        assert outcome.state is DispatchState.DONE
        assert outcome.delivery.status is DeliveryStatus.DISABLED
        assert outcome.request is None
        assert outcome.notification.status is NotificationStatus.ENQUEUED

    assert relay.call_count == 0
    assert memory_sink.enqueue_calls == 2
    listener.assert_not_called()


@pytest.mark.asyncio
async def test_alerts_off_in_range_is_still_skipped(dispatcher, memory_sink, make_bp, strict_rules, make_settings):
    outcome = await _dispatch(dispatcher, make_bp(110, 70), strict_rules, make_settings(alerts_enabled=False))

    assert outcome.state is DispatchState.SKIPPED
    assert memory_sink.enqueue_calls == 0


@pytest.mark.asyncio
async def test_send_test_alert(dispatcher, relay, memory_sink, make_settings):
    settings = make_settings(contacts=("brother@example.com", "doctor@example.com"), alerts_enabled=False)

    request, delivery = await dispatcher.send_test_alert(settings)

    assert delivery.status is DeliveryStatus.SENT
    assert request.subject == f"{TEST_APP_NAME} Test Alert: System Check"
    payload = json.loads(relay.requests[0].content)
    assert payload["to"] == ["brother@example.com", "doctor@example.com"]
    assert "verify the email system is working properly" in payload["body"]
    assert memory_sink.enqueue_calls == 0


@pytest.mark.asyncio
async def test_concurrent_dispatches_stay_independent(
    dispatcher, relay, memory_sink, make_bp, make_sugar, strict_rules, make_settings
):
    bp = make_bp(150, 95, user_id=1)
    sugar = make_sugar(65, ReadingContext.FASTING, user_id=2)
    jane = make_settings(contacts=("brother@example.com",), user_id=1, name="Jane Doe")
    omar = make_settings(contacts=("sister@example.com",), user_id=2, name="Omar Ali")

    first, second = await asyncio.gather(
        _dispatch(dispatcher, bp, strict_rules, jane),
        _dispatch(dispatcher, sugar, strict_rules, omar),
    )

    assert first.notification.notification_id == f"vital-alert-{bp.id}"
    assert second.notification.notification_id == f"vital-alert-{sugar.id}"
    assert {n.id for n in memory_sink.notifications} == {f"vital-alert-{bp.id}", f"vital-alert-{sugar.id}"}

    assert relay.call_count == 2
    payloads = {tuple(p["to"]): p for p in (json.loads(r.content) for r in relay.requests)}
    assert payloads[("brother@example.com",)]["subject"].endswith("for Jane Doe")
    assert "150/95 mmHg" in payloads[("brother@example.com",)]["body"]
    assert payloads[("sister@example.com",)]["subject"].endswith("for Omar Ali")
    assert "65 mg/dL (Fasting)" in payloads[("sister@example.com",)]["body"]


@pytest.mark.asyncio
async def test_repository_sink_wraps_database_errors(email_client, notification_repo, make_bp, strict_rules, make_settings):
    # No user 999 exists, so the foreign key rejects the row
    sink = RepositoryNotificationSink(notification_repository=notification_repo)
    notification = LocalNotification(id="vital-alert-r1", title="Blood Pressure Out of Range", body="body")

    with pytest.raises(NotificationSinkError) as exc_info:
        await sink.enqueue(notification, user_id=999)
    assert exc_info.value.context["notification_id"] == "vital-alert-r1"

    dispatcher = AlertDispatcher(email_client=email_client, notification_sink=sink, app_name=TEST_APP_NAME)
    outcome = await _dispatch(dispatcher, make_bp(150, 95, user_id=999), strict_rules, make_settings(user_id=999))

    assert outcome.delivery.status is DeliveryStatus.SENT
    assert outcome.notification.status is NotificationStatus.FAILED
    assert outcome.notification.reason.startswith("Could not store notification")
