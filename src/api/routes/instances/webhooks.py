"""Rotas de diagnóstico de webhook de uma instância."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from api.dependencies import get_dispatcher, get_registry
from api.schemas import WebhookTestRequest, success_response
from app.services import InstanceRegistry, WebhookDispatcher

router = APIRouter()


@router.post("/{instance_id}/webhook/test")
async def test_webhook(
    instance_id: str,
    body: WebhookTestRequest | None = Body(default=None),
    registry: InstanceRegistry = Depends(get_registry),
    dispatcher: WebhookDispatcher = Depends(get_dispatcher),
) -> dict[str, Any]:
    """Enfileira evento sintético ignorando o filtro de assinatura."""
    instance = registry.get(instance_id)
    event = dispatcher.test_delivery(instance_id, body.event if body else None)
    return success_response(
        {
            "sent": True,
            "webhookUrl": instance.webhook_url,
            "testEvent": event.to_wire(),
        }
    )


@router.get("/{instance_id}/webhook/status")
async def webhook_status(
    instance_id: str,
    registry: InstanceRegistry = Depends(get_registry),
    dispatcher: WebhookDispatcher = Depends(get_dispatcher),
) -> dict[str, Any]:
    registry.get(instance_id)
    return success_response(dispatcher.status(instance_id))
