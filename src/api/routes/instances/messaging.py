"""Ações que exigem instância conectada (503 caso contrário)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from api.dependencies import get_controller
from api.schemas import (
    CheckNumberRequest,
    EditMessageRequest,
    PresenceRequest,
    ReactionRequest,
    SendTextRequest,
    success_response,
)
from app.domain.webhook import now_ms
from app.services import ConnectionController

router = APIRouter()


@router.post("/{instance_id}/send-text")
async def send_text(
    body: SendTextRequest,
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    result = await controller.send_text(body.to, body.text, body.quoted)
    return success_response(
        {"messageId": result.get("messageId"), "to": body.to, "timestamp": now_ms()}
    )


@router.patch("/{instance_id}/messages/edit")
async def edit_message(
    body: EditMessageRequest,
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    result = await controller.edit_message(body.message_id, body.text)
    return success_response(result, message="Message edited successfully")


@router.delete("/{instance_id}/messages/{message_id}")
async def delete_message(
    message_id: str,
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    result = await controller.delete_message(message_id)
    return success_response(result, message="Message deleted successfully")


@router.post("/{instance_id}/messages/reaction")
async def send_reaction(
    body: ReactionRequest,
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    result = await controller.send_reaction(body.message_id, body.emoji)
    return success_response(result)


@router.post("/{instance_id}/check-number")
async def check_number(
    body: CheckNumberRequest,
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    result = await controller.check_number(body.phone)
    return success_response(result)


@router.post("/{instance_id}/presence")
async def set_presence(
    body: PresenceRequest,
    controller: ConnectionController = Depends(get_controller),
) -> dict[str, Any]:
    result = await controller.set_presence(body.status)
    return success_response(result)
