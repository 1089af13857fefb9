"""Factories de serviços: composition root do core.

Cria provider, dispatcher, stats e registry a partir das settings.
Settings são passadas explicitamente (sem estado global), permitindo
que testes montem apps com segredos distintos.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.infra.providers import StubConnectionProvider
from app.infra.webhooks import WebhookSender
from app.services import InstanceRegistry, WebhookDispatcher, WebhookStatsTracker

if TYPE_CHECKING:
    import httpx

    from app.protocols.connection_provider import ConnectionProviderFactory
    from config.settings import ApiSettings, WebhookSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServiceContainer:
    """Serviços compartilhados pela aplicação (guardados em app.state)."""

    api_settings: ApiSettings
    webhook_settings: WebhookSettings
    stats: WebhookStatsTracker
    dispatcher: WebhookDispatcher
    registry: InstanceRegistry

    async def shutdown(self) -> None:
        await self.registry.dispose_all()
        await self.dispatcher.close()


def create_provider_factory(api_settings: ApiSettings) -> ConnectionProviderFactory:
    """Cria a factory de providers conforme CONNECTION_PROVIDER.

    Raises:
        ValueError: Provider não suportado.
    """
    provider = api_settings.connection_provider
    if provider == "stub":

        def _create_stub(instance_id: str) -> StubConnectionProvider:
            return StubConnectionProvider(
                instance_id,
                session_path=api_settings.session_path,
                auto_pair=api_settings.stub_auto_pair,
                pairing_delay_ms=api_settings.stub_pairing_delay_ms,
            )

        logger.info(
            "connection_provider_selected",
            extra={"provider": "stub", "auto_pair": api_settings.stub_auto_pair},
        )
        return _create_stub

    raise ValueError(f"CONNECTION_PROVIDER não suportado: {provider}")


def create_services(
    api_settings: ApiSettings,
    webhook_settings: WebhookSettings,
    *,
    provider_factory: ConnectionProviderFactory | None = None,
    webhook_transport: httpx.AsyncBaseTransport | None = None,
) -> ServiceContainer:
    """Monta o grafo de serviços.

    Args:
        api_settings: Settings da API
        webhook_settings: Settings de entrega de webhook
        provider_factory: Substitui o provider configurado (testes)
        webhook_transport: Transport httpx da entrega (testes usam MockTransport)
    """
    stats = WebhookStatsTracker()
    sender = WebhookSender(
        secret=webhook_settings.secret,
        timeout_seconds=webhook_settings.timeout_seconds,
        transport=webhook_transport,
    )
    dispatcher = WebhookDispatcher(webhook_settings, stats, sender=sender)
    registry = InstanceRegistry(
        dispatcher,
        stats,
        provider_factory or create_provider_factory(api_settings),
    )
    return ServiceContainer(
        api_settings=api_settings,
        webhook_settings=webhook_settings,
        stats=stats,
        dispatcher=dispatcher,
        registry=registry,
    )
