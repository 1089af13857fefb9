"""Registro de instâncias: identidade, unicidade e CRUD.

O lock protege apenas o mapa; chamadas ao provider e IO de rede
acontecem sempre fora dele.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.domain.instance import INSTANCE_ID_PATTERN, Instance, is_valid_instance_id
from app.domain.webhook import RECOGNIZED_EVENTS, dedupe_events, is_recognized_event
from app.protocols.connection_provider import ConnectionProviderFactory
from app.services.connection_controller import ConnectionController
from app.services.webhook_dispatcher import WebhookDispatcher
from app.services.webhook_stats import WebhookStatsTracker
from utils.errors import BadRequestError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)

_HTTP_URL = TypeAdapter(AnyHttpUrl)

# Distingue "campo ausente" de "campo nulo" em updates parciais
UNSET: Any = object()


def validate_instance_id(instance_id: str) -> str:
    if not is_valid_instance_id(instance_id):
        raise BadRequestError(
            "Invalid instance ID",
            details={
                "field": "instanceId",
                "pattern": INSTANCE_ID_PATTERN.pattern,
            },
        )
    return instance_id


def validate_webhook_url(url: str | None) -> str | None:
    """Retorna a URL original (ou None) se for http(s) absoluta."""
    if not url:
        return None
    try:
        _HTTP_URL.validate_python(url)
    except PydanticValidationError as exc:
        raise BadRequestError(
            "Invalid webhook URL",
            details={"field": "webhookUrl", "reason": exc.errors()[0]["msg"]},
        ) from exc
    return url


def validate_webhook_events(events: list[str] | None) -> list[str]:
    if not events:
        return []
    invalid = [event for event in events if not is_recognized_event(event)]
    if invalid:
        raise BadRequestError(
            "Invalid webhook events",
            details={
                "field": "webhookEvents",
                "invalidEvents": invalid,
                "allowed": list(RECOGNIZED_EVENTS),
            },
        )
    return dedupe_events(events)


class InstanceRegistry:
    """Dono de todos os registros de instância.

    Args:
        dispatcher: Dispatcher de webhooks (destinos e filas)
        stats: Contadores de entrega
        provider_factory: Cria o provider de conexão de uma instância
    """

    def __init__(
        self,
        dispatcher: WebhookDispatcher,
        stats: WebhookStatsTracker,
        provider_factory: ConnectionProviderFactory,
    ) -> None:
        self._dispatcher = dispatcher
        self._stats = stats
        self._provider_factory = provider_factory
        self._controllers: dict[str, ConnectionController] = {}
        self._lock = asyncio.Lock()

    async def create(
        self,
        instance_id: str,
        webhook_url: str | None = None,
        webhook_events: list[str] | None = None,
    ) -> Instance:
        """Registra nova instância em `disconnected`.

        Raises:
            BadRequestError: id, URL ou eventos inválidos.
            ConflictError: id já registrado.
        """
        validate_instance_id(instance_id)
        url = validate_webhook_url(webhook_url)
        events = validate_webhook_events(webhook_events)

        async with self._lock:
            if instance_id in self._controllers:
                raise ConflictError(
                    f"Instance {instance_id} already exists",
                    details={"instanceId": instance_id},
                )
            instance = Instance(instance_id=instance_id, webhook_url=url, webhook_events=events)
            controller = ConnectionController(
                instance,
                self._provider_factory(instance_id),
                self._dispatcher.enqueue,
            )
            self._controllers[instance_id] = controller
            self._stats.reset(instance_id)
            self._dispatcher.configure(instance_id, url, events)

        logger.info(
            "instance_created",
            extra={
                "instance_id": instance_id,
                "webhook_enabled": instance.webhook_enabled,
                "webhook_events": len(events),
            },
        )
        return instance

    def controller(self, instance_id: str) -> ConnectionController:
        controller = self._controllers.get(instance_id)
        if controller is None:
            raise NotFoundError("Instance")
        return controller

    def get(self, instance_id: str) -> Instance:
        return self.controller(instance_id).instance

    def list(self) -> list[Instance]:
        return [controller.instance for controller in list(self._controllers.values())]

    def __len__(self) -> int:
        return len(self._controllers)

    async def update(
        self,
        instance_id: str,
        webhook_url: str | None = UNSET,
        webhook_events: list[str] | None = UNSET,
    ) -> Instance:
        """Atualiza apenas os campos de webhook informados.

        `webhook_url=""` (ou None) desativa webhooks.
        """
        url = UNSET if webhook_url is UNSET else validate_webhook_url(webhook_url)
        events = UNSET if webhook_events is UNSET else validate_webhook_events(webhook_events)

        async with self._lock:
            instance = self.get(instance_id)
            instance.configure_webhook(
                instance.webhook_url if url is UNSET else url,
                instance.webhook_events if events is UNSET else events,
            )
            self._dispatcher.configure(
                instance_id, instance.webhook_url, instance.webhook_events
            )

        logger.info(
            "instance_updated",
            extra={"instance_id": instance_id, "webhook_enabled": instance.webhook_enabled},
        )
        return instance

    async def delete(self, instance_id: str) -> None:
        """Remove a instância, cancela a fila e libera o provider.

        Raises:
            NotFoundError: id desconhecido (inclusive na segunda remoção).
        """
        async with self._lock:
            controller = self._controllers.pop(instance_id, None)
        if controller is None:
            raise NotFoundError("Instance")

        await self._teardown(instance_id, controller)
        logger.info("instance_deleted", extra={"instance_id": instance_id})

    async def _teardown(self, instance_id: str, controller: ConnectionController) -> None:
        await self._dispatcher.unregister(instance_id)
        await controller.close()
        self._stats.discard(instance_id)

    async def dispose_all(self) -> None:
        """Hook de shutdown: derruba todas as instâncias."""
        async with self._lock:
            controllers = dict(self._controllers)
            self._controllers.clear()

        results = await asyncio.gather(
            *(self._teardown(iid, ctrl) for iid, ctrl in controllers.items()),
            return_exceptions=True,
        )
        for instance_id, result in zip(controllers, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(
                    "instance_teardown_failed",
                    extra={"instance_id": instance_id, "error_type": type(result).__name__},
                )
        logger.info("instances_disposed", extra={"count": len(controllers)})
