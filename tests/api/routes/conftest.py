"""Fixtures das rotas HTTP: app com provider fake e receptor de webhook."""

from __future__ import annotations

import pytest
from fastapi import FastAPI

from app.app import create_app
from app.bootstrap import ServiceContainer, create_services
from config.settings import ApiSettings, WebhookSettings
from tests.fakes.fake_connection_provider import FakeProviderFactory
from tests.fakes.webhook_receiver import WebhookReceiver

API_KEY = "route-test-key"
WEBHOOK_SECRET = "route-test-secret"


@pytest.fixture
def receiver() -> WebhookReceiver:
    return WebhookReceiver()


@pytest.fixture
def providers() -> FakeProviderFactory:
    return FakeProviderFactory()


@pytest.fixture
def services(receiver: WebhookReceiver, providers: FakeProviderFactory) -> ServiceContainer:
    return create_services(
        ApiSettings(api_key=API_KEY),
        WebhookSettings(secret=WEBHOOK_SECRET, max_retries=2, retry_delay_ms=1),
        provider_factory=providers,
        webhook_transport=receiver.transport,
    )


@pytest.fixture
def app(services: ServiceContainer) -> FastAPI:
    return create_app(services)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {API_KEY}"}
