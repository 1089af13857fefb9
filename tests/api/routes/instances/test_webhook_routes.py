"""Testes das rotas de webhook (teste de entrega e status)."""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from app.bootstrap import ServiceContainer
from app.infra.crypto import verify_signature
from tests.fakes.webhook_receiver import WebhookReceiver

WEBHOOK_SECRET = "route-test-secret"


def _client(app: FastAPI) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_test_event_is_delivered_once_and_signed(
    app: FastAPI,
    auth_headers: dict[str, str],
    services: ServiceContainer,
    receiver: WebhookReceiver,
) -> None:
    async with _client(app) as client:
        await client.post(
            "/instances",
            json={
                "instanceId": "bot-1",
                "webhookUrl": "http://x/hook",
                "webhookEvents": ["message"],
            },
            headers=auth_headers,
        )
        response = await client.post(
            "/instances/bot-1/webhook/test", json={"event": "message"}, headers=auth_headers
        )
        await services.dispatcher.join("bot-1")
        status = await client.get("/instances/bot-1/webhook/status", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["sent"] is True
    assert data["webhookUrl"] == "http://x/hook"
    assert data["testEvent"]["event"] == "message"
    assert data["testEvent"]["instanceId"] == "bot-1"

    assert len(receiver.received) == 1
    hook = receiver.received[0]
    assert hook.url == "http://x/hook"
    assert hook.json["event"] == "message"
    assert hook.headers["user-agent"] == "Miaw-Webhook/1.0"
    assert verify_signature(
        hook.body,
        int(hook.headers["x-miaw-timestamp"]),
        hook.headers["x-miaw-signature"],
        WEBHOOK_SECRET,
    )

    stats = status.json()["data"]["stats"]
    assert stats["queued"] == 1
    assert stats["delivered"] == 1
    assert stats["failed"] == 0
    assert stats["lastDeliveryTime"] is not None
    await services.shutdown()


@pytest.mark.asyncio
async def test_default_test_event(
    app: FastAPI,
    auth_headers: dict[str, str],
    services: ServiceContainer,
    receiver: WebhookReceiver,
) -> None:
    async with _client(app) as client:
        await client.post(
            "/instances",
            json={"instanceId": "bot-1", "webhookUrl": "http://x/hook"},
            headers=auth_headers,
        )
        response = await client.post("/instances/bot-1/webhook/test", headers=auth_headers)
        await services.dispatcher.join("bot-1")

    assert response.json()["data"]["testEvent"]["event"] == "test"
    assert receiver.events == ["test"]
    assert receiver.received[0].json["data"]["test"] is True
    await services.shutdown()


@pytest.mark.asyncio
async def test_webhook_test_without_url_is_bad_request(
    app: FastAPI, auth_headers: dict[str, str], receiver: WebhookReceiver
) -> None:
    async with _client(app) as client:
        await client.post("/instances", json={"instanceId": "bot-1"}, headers=auth_headers)
        response = await client.post("/instances/bot-1/webhook/test", headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "No webhook URL configured for this instance"
    assert receiver.received == []


@pytest.mark.asyncio
async def test_webhook_routes_unknown_instance(
    app: FastAPI, auth_headers: dict[str, str]
) -> None:
    async with _client(app) as client:
        test = await client.post("/instances/ghost/webhook/test", headers=auth_headers)
        status = await client.get("/instances/ghost/webhook/status", headers=auth_headers)

    assert test.status_code == 404
    assert status.status_code == 404


@pytest.mark.asyncio
async def test_failed_deliveries_are_counted(
    app: FastAPI,
    auth_headers: dict[str, str],
    services: ServiceContainer,
    receiver: WebhookReceiver,
) -> None:
    receiver.responder = lambda _n, _body: 500
    async with _client(app) as client:
        await client.post(
            "/instances",
            json={"instanceId": "bot-1", "webhookUrl": "http://x/hook"},
            headers=auth_headers,
        )
        await client.post("/instances/bot-1/webhook/test", headers=auth_headers)
        await services.dispatcher.join("bot-1")
        status = await client.get("/instances/bot-1/webhook/status", headers=auth_headers)

    stats = status.json()["data"]["stats"]
    assert stats["failed"] == 2
    assert stats["delivered"] == 0
    assert len(receiver.received) == 2
    await services.shutdown()
