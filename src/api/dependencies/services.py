"""Acesso aos serviços montados no bootstrap (app.state.services)."""

from __future__ import annotations

from fastapi import Request

from app.bootstrap.dependencies import ServiceContainer
from app.services import ConnectionController, InstanceRegistry, WebhookDispatcher


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_registry(request: Request) -> InstanceRegistry:
    return get_services(request).registry


def get_dispatcher(request: Request) -> WebhookDispatcher:
    return get_services(request).dispatcher


def get_controller(instance_id: str, request: Request) -> ConnectionController:
    """Resolve o controller do `{instance_id}` da rota (404 se ausente)."""
    return get_registry(request).controller(instance_id)
