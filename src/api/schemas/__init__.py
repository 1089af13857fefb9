"""Schemas HTTP (pydantic) e envelope de resposta."""

from api.schemas.envelope import success_response
from api.schemas.instances import (
    CheckNumberRequest,
    CreateInstanceRequest,
    EditMessageRequest,
    PresenceRequest,
    ReactionRequest,
    SendTextRequest,
    UpdateInstanceRequest,
    WebhookTestRequest,
)

__all__ = [
    "CheckNumberRequest",
    "CreateInstanceRequest",
    "EditMessageRequest",
    "PresenceRequest",
    "ReactionRequest",
    "SendTextRequest",
    "UpdateInstanceRequest",
    "WebhookTestRequest",
    "success_response",
]
