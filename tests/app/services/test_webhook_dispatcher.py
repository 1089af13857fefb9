"""Testes do WebhookDispatcher (fila por instância, retry e filtro)."""

from __future__ import annotations

import asyncio

import pytest

from app.domain.webhook import TEST_EVENT_MESSAGE, WebhookEvent
from app.infra.crypto import verify_signature
from app.infra.webhooks import WebhookSender
from app.services.webhook_dispatcher import WebhookDispatcher, WebhookTarget
from app.services.webhook_stats import WebhookStatsTracker
from config.settings.webhook import WebhookSettings
from tests.fakes.webhook_receiver import WebhookReceiver
from utils.errors import BadRequestError

SECRET = "dispatcher-secret"
URL = "http://receiver.local/hook"


def _dispatcher(
    receiver: WebhookReceiver, *, max_retries: int = 3
) -> tuple[WebhookDispatcher, WebhookStatsTracker]:
    settings = WebhookSettings(secret=SECRET, max_retries=max_retries, retry_delay_ms=1)
    stats = WebhookStatsTracker()
    sender = WebhookSender(SECRET, transport=receiver.transport)
    return WebhookDispatcher(settings, stats, sender=sender), stats


def _event(event_type: str, instance_id: str = "bot-1", **data: object) -> WebhookEvent:
    return WebhookEvent(event_type=event_type, instance_id=instance_id, data=dict(data))


def test_empty_subscription_accepts_everything() -> None:
    assert WebhookTarget(url=URL).accepts("presence")
    assert WebhookTarget(url=URL, events=("message",)).accepts("message")
    assert not WebhookTarget(url=URL, events=("message",)).accepts("qr")


@pytest.mark.asyncio
async def test_delivers_signed_body() -> None:
    receiver = WebhookReceiver()
    dispatcher, stats = _dispatcher(receiver)
    dispatcher.configure("bot-1", URL, [])
    try:
        assert dispatcher.enqueue("bot-1", _event("message", text="oi"))
        await dispatcher.join("bot-1")
    finally:
        await dispatcher.close()

    hook = receiver.received[0]
    assert hook.url == URL
    assert hook.json["event"] == "message"
    assert hook.json["instanceId"] == "bot-1"
    assert hook.json["data"] == {"text": "oi"}
    assert verify_signature(
        hook.body,
        int(hook.headers["x-miaw-timestamp"]),
        hook.headers["x-miaw-signature"],
        SECRET,
    )
    assert stats.snapshot("bot-1").delivered == 1


@pytest.mark.asyncio
async def test_failed_head_blocks_later_events() -> None:
    receiver = WebhookReceiver(responder=lambda n, _body: 500 if n == 1 else 200)
    dispatcher, stats = _dispatcher(receiver)
    dispatcher.configure("bot-1", URL, [])
    try:
        dispatcher.enqueue("bot-1", _event("message", n=1))
        dispatcher.enqueue("bot-1", _event("message", n=2))
        await dispatcher.join("bot-1")
    finally:
        await dispatcher.close()

    assert [hook.json["data"]["n"] for hook in receiver.received] == [1, 1, 2]
    snapshot = stats.snapshot("bot-1")
    assert (snapshot.queued, snapshot.delivered, snapshot.failed) == (2, 2, 1)


@pytest.mark.asyncio
async def test_retry_is_bounded_by_max_retries() -> None:
    receiver = WebhookReceiver(responder=lambda _n, _body: 503)
    dispatcher, stats = _dispatcher(receiver, max_retries=3)
    dispatcher.configure("bot-1", URL, [])
    try:
        dispatcher.enqueue("bot-1", _event("qr"))
        await dispatcher.join("bot-1")
    finally:
        await dispatcher.close()

    assert len(receiver.received) == 3
    snapshot = stats.snapshot("bot-1")
    assert snapshot.failed == 3
    assert snapshot.delivered == 0
    assert snapshot.last_failure_time is not None


@pytest.mark.asyncio
async def test_unsubscribed_event_is_dropped() -> None:
    receiver = WebhookReceiver()
    dispatcher, stats = _dispatcher(receiver)
    dispatcher.configure("bot-1", URL, ["message"])
    try:
        assert not dispatcher.enqueue("bot-1", _event("presence"))
        assert dispatcher.enqueue("bot-1", _event("message"))
        await dispatcher.join("bot-1")
    finally:
        await dispatcher.close()

    assert receiver.events == ["message"]
    assert stats.snapshot("bot-1").queued == 1


@pytest.mark.asyncio
async def test_without_url_nothing_is_queued() -> None:
    receiver = WebhookReceiver()
    dispatcher, stats = _dispatcher(receiver)
    dispatcher.configure("bot-1", None, [])

    assert not dispatcher.enqueue("bot-1", _event("message"))
    assert not dispatcher.enqueue("unknown", _event("message", instance_id="unknown"))
    assert dispatcher.queue_size("bot-1") == 0
    assert stats.snapshot("bot-1").queued == 0
    await dispatcher.close()


@pytest.mark.asyncio
async def test_instances_do_not_block_each_other() -> None:
    receiver = WebhookReceiver(
        responder=lambda _n, body: 500 if body["instanceId"] == "slow" else 200
    )
    dispatcher, stats = _dispatcher(receiver, max_retries=2)
    dispatcher.configure("slow", URL, [])
    dispatcher.configure("fast", URL, [])
    try:
        dispatcher.enqueue("slow", _event("message", instance_id="slow"))
        dispatcher.enqueue("fast", _event("message", instance_id="fast"))
        await dispatcher.join("fast")
        await dispatcher.join("slow")
    finally:
        await dispatcher.close()

    assert stats.snapshot("fast").delivered == 1
    assert stats.snapshot("slow").failed == 2


@pytest.mark.asyncio
async def test_test_delivery_bypasses_subscription_filter() -> None:
    receiver = WebhookReceiver()
    dispatcher, stats = _dispatcher(receiver)
    dispatcher.configure("bot-1", URL, ["message"])
    try:
        event = dispatcher.test_delivery("bot-1")
        dispatcher.test_delivery("bot-1", "qr")
        await dispatcher.join("bot-1")
    finally:
        await dispatcher.close()

    assert event.event_type == "test"
    assert event.data == {"test": True, "message": TEST_EVENT_MESSAGE}
    assert receiver.events == ["test", "qr"]
    assert stats.snapshot("bot-1").queued == 2


@pytest.mark.asyncio
async def test_test_delivery_errors() -> None:
    receiver = WebhookReceiver()
    dispatcher, _ = _dispatcher(receiver)
    dispatcher.configure("no-url", None, [])
    dispatcher.configure("bot-1", URL, [])

    with pytest.raises(BadRequestError, match="No webhook URL"):
        dispatcher.test_delivery("no-url", "message")
    with pytest.raises(BadRequestError, match="Unknown event type"):
        dispatcher.test_delivery("bot-1", "bogus")

    assert receiver.received == []
    await dispatcher.close()


@pytest.mark.asyncio
async def test_unregister_discards_pending_events() -> None:
    receiver = WebhookReceiver(responder=lambda _n, _body: 500)
    settings = WebhookSettings(secret=SECRET, max_retries=6, retry_delay_ms=60_000)
    dispatcher = WebhookDispatcher(
        settings,
        WebhookStatsTracker(),
        sender=WebhookSender(SECRET, transport=receiver.transport),
    )
    dispatcher.configure("bot-1", URL, [])

    dispatcher.enqueue("bot-1", _event("message", n=1))
    dispatcher.enqueue("bot-1", _event("message", n=2))
    # Deixa o worker falhar a primeira tentativa e entrar no backoff
    while not receiver.received:
        await asyncio.sleep(0)
    await dispatcher.unregister("bot-1")

    assert len(receiver.received) == 1
    assert dispatcher.queue_size("bot-1") == 0
    assert not dispatcher.enqueue("bot-1", _event("message", n=3))
    await dispatcher.close()


@pytest.mark.asyncio
async def test_status_shape() -> None:
    receiver = WebhookReceiver()
    dispatcher, stats = _dispatcher(receiver)
    stats.reset("bot-1")
    dispatcher.configure("bot-1", URL, ["qr", "ready"])

    status = dispatcher.status("bot-1")

    assert status == {
        "instanceId": "bot-1",
        "webhookUrl": URL,
        "webhookEvents": ["qr", "ready"],
        "stats": {
            "queued": 0,
            "delivered": 0,
            "failed": 0,
            "lastDeliveryTime": None,
            "lastFailureTime": None,
        },
    }
    await dispatcher.close()
