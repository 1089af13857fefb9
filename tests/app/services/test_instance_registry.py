"""Testes do InstanceRegistry (CRUD, unicidade e teardown)."""

from __future__ import annotations

import pytest

from app.infra.webhooks import WebhookSender
from app.services.instance_registry import (
    InstanceRegistry,
    validate_webhook_events,
    validate_webhook_url,
)
from app.services.webhook_dispatcher import WebhookDispatcher
from app.services.webhook_stats import WebhookStatsTracker
from config.settings.webhook import WebhookSettings
from fsm import ConnectionState
from tests.fakes.fake_connection_provider import FakeProviderFactory
from tests.fakes.webhook_receiver import WebhookReceiver
from utils.errors import BadRequestError, ConflictError, NotFoundError

URL = "http://receiver.local/hook"


def _registry() -> tuple[InstanceRegistry, WebhookDispatcher, FakeProviderFactory, WebhookReceiver]:
    receiver = WebhookReceiver()
    stats = WebhookStatsTracker()
    dispatcher = WebhookDispatcher(
        WebhookSettings(secret="s", retry_delay_ms=1),
        stats,
        sender=WebhookSender("s", transport=receiver.transport),
    )
    factory = FakeProviderFactory()
    return InstanceRegistry(dispatcher, stats, factory), dispatcher, factory, receiver


@pytest.mark.asyncio
async def test_create_and_get() -> None:
    registry, _, factory, _ = _registry()

    instance = await registry.create("bot-1", URL, ["message", "qr", "message"])

    assert registry.get("bot-1") is instance
    assert instance.state is ConnectionState.DISCONNECTED
    assert instance.webhook_url == URL
    assert instance.webhook_events == ["message", "qr"]
    assert "bot-1" in factory.providers
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_duplicate_id_conflicts_without_touching_original() -> None:
    registry, _, _, _ = _registry()
    first = await registry.create("bot-1", URL, ["message"])

    with pytest.raises(ConflictError, match="Instance bot-1 already exists"):
        await registry.create("bot-1", None, [])

    assert registry.get("bot-1") is first
    assert first.webhook_url == URL
    assert len(registry) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("instance_id", ["", "bad id", "a" * 51, "bot/1", "bot-1\n"])
async def test_invalid_ids_are_rejected(instance_id: str) -> None:
    registry, _, _, _ = _registry()

    with pytest.raises(BadRequestError):
        await registry.create(instance_id)
    assert len(registry) == 0


def test_webhook_url_validation() -> None:
    assert validate_webhook_url(None) is None
    assert validate_webhook_url("") is None
    assert validate_webhook_url("https://example.com/hook?x=1") == "https://example.com/hook?x=1"
    for bad in ("not-a-url", "ftp://example.com/hook", "/relative"):
        with pytest.raises(BadRequestError):
            validate_webhook_url(bad)


def test_webhook_events_validation() -> None:
    assert validate_webhook_events(None) == []
    assert validate_webhook_events(["ready", "qr", "ready"]) == ["ready", "qr"]
    with pytest.raises(BadRequestError) as exc_info:
        validate_webhook_events(["ready", "bogus"])
    assert exc_info.value.details["invalidEvents"] == ["bogus"]


@pytest.mark.asyncio
async def test_unknown_id_is_not_found() -> None:
    registry, _, _, _ = _registry()

    with pytest.raises(NotFoundError):
        registry.get("ghost")
    with pytest.raises(NotFoundError):
        await registry.update("ghost", webhook_url=URL)


@pytest.mark.asyncio
async def test_partial_update() -> None:
    registry, dispatcher, _, _ = _registry()
    await registry.create("bot-1", URL, ["message"])

    instance = await registry.update("bot-1", webhook_events=["qr"])
    assert instance.webhook_url == URL
    assert instance.webhook_events == ["qr"]

    instance = await registry.update("bot-1", webhook_url="")
    assert instance.webhook_url is None
    assert not instance.webhook_enabled
    assert dispatcher.status("bot-1")["webhookUrl"] is None


@pytest.mark.asyncio
async def test_invalid_update_keeps_previous_config() -> None:
    registry, _, _, _ = _registry()
    await registry.create("bot-1", URL, ["message"])

    with pytest.raises(BadRequestError):
        await registry.update("bot-1", webhook_url="nope")

    assert registry.get("bot-1").webhook_url == URL


@pytest.mark.asyncio
async def test_state_changes_reach_the_webhook() -> None:
    registry, dispatcher, factory, receiver = _registry()
    await registry.create("bot-1", URL, ["ready"])
    controller = registry.controller("bot-1")

    await controller.connect()
    await controller.wait_connect()
    await factory.providers["bot-1"].emit("ready", {"phoneNumber": "5511977776666"})
    await dispatcher.join("bot-1")

    assert receiver.events == ["ready"]
    assert receiver.received[0].json["data"]["phoneNumber"] == "5511977776666"
    await registry.dispose_all()
    await dispatcher.close()


@pytest.mark.asyncio
async def test_delete_twice_is_not_found() -> None:
    registry, dispatcher, factory, _ = _registry()
    await registry.create("bot-1", URL)

    await registry.delete("bot-1")

    assert len(registry) == 0
    assert factory.providers["bot-1"].calls[-1] == "dispose"
    assert dispatcher.status("bot-1")["webhookUrl"] is None
    with pytest.raises(NotFoundError):
        await registry.delete("bot-1")


@pytest.mark.asyncio
async def test_recreate_resets_stats() -> None:
    registry, dispatcher, _, _ = _registry()
    await registry.create("bot-1", URL)
    dispatcher.test_delivery("bot-1")
    await dispatcher.join("bot-1")
    await registry.delete("bot-1")

    await registry.create("bot-1", URL)

    assert dispatcher.status("bot-1")["stats"]["queued"] == 0
    await dispatcher.close()


@pytest.mark.asyncio
async def test_dispose_all() -> None:
    registry, _, factory, _ = _registry()
    await registry.create("a")
    await registry.create("b")

    await registry.dispose_all()

    assert registry.list() == []
    assert all(p.calls[-1] == "dispose" for p in factory.providers.values())
