"""Rotas de CRUD e ciclo de conexão das instâncias.

Endpoints:
- POST/GET /instances, GET/PATCH/DELETE /instances/{instance_id}
- POST connect, DELETE disconnect, POST restart, GET status
- POST logout, POST dispose, DELETE session
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, status

from api.dependencies import get_controller, get_registry
from api.schemas import CreateInstanceRequest, UpdateInstanceRequest, success_response
from app.services import ConnectionController, InstanceRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_instance(
    body: CreateInstanceRequest,
    registry: InstanceRegistry = Depends(get_registry),
) -> dict[str, Any]:
    instance = await registry.create(
        body.instance_id,
        webhook_url=body.webhook_url,
        webhook_events=body.webhook_events,
    )
    return success_response(instance.to_dict())


@router.get("")
async def list_instances(registry: InstanceRegistry = Depends(get_registry)) -> dict[str, Any]:
    return success_response([instance.to_dict() for instance in registry.list()])


@router.get("/{instance_id}")
async def get_instance(
    instance_id: str,
    registry: InstanceRegistry = Depends(get_registry),
) -> dict[str, Any]:
    return success_response(registry.get(instance_id).to_dict())


@router.patch("/{instance_id}")
async def update_instance(
    instance_id: str,
    body: UpdateInstanceRequest,
    registry: InstanceRegistry = Depends(get_registry),
) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    if "webhook_url" in body.model_fields_set:
        changes["webhook_url"] = body.webhook_url
    if "webhook_events" in body.model_fields_set:
        changes["webhook_events"] = body.webhook_events or []
    instance = await registry.update(instance_id, **changes)
    return success_response(instance.to_dict())


@router.delete("/{instance_id}")
async def delete_instance(
    instance_id: str,
    registry: InstanceRegistry = Depends(get_registry),
) -> dict[str, Any]:
    await registry.delete(instance_id)
    return success_response(message="Instance deleted successfully")


@router.post("/{instance_id}/connect")
async def connect_instance(
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    state = await controller.connect()
    return success_response({"status": state.value})


@router.delete("/{instance_id}/disconnect")
async def disconnect_instance(
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    state = await controller.disconnect()
    return success_response({"status": state.value}, message="Instance disconnected successfully")


@router.post("/{instance_id}/restart")
async def restart_instance(
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    state = await controller.restart()
    return success_response({"status": state.value}, message="Instance restarted successfully")


@router.get("/{instance_id}/status")
async def instance_status(
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    return success_response(controller.instance.status_dict())


@router.post("/{instance_id}/logout")
async def logout_instance(
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    await controller.logout()
    return success_response(message="Logged out successfully. Session cleared.")


@router.post("/{instance_id}/dispose")
async def dispose_instance(
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    await controller.dispose()
    return success_response(message="Instance disposed successfully. Resources cleaned up.")


@router.delete("/{instance_id}/session")
async def clear_instance_session(
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    cleared = controller.clear_session()
    return success_response(
        {"cleared": cleared},
        message="Session cleared successfully." if cleared else "No session to clear.",
    )
