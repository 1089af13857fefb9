"""Schemas de request das rotas de instância.

Campos em camelCase no JSON (alias) e snake_case no Python.
Regras de domínio (padrão do id, URL, tags de evento) são validadas
pelo InstanceRegistry e retornam INVALID_REQUEST.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CreateInstanceRequest(_CamelModel):
    instance_id: str = Field(..., alias="instanceId", description="Identificador único.")
    webhook_url: str | None = Field(default=None, alias="webhookUrl")
    webhook_events: list[str] | None = Field(default=None, alias="webhookEvents")


class UpdateInstanceRequest(_CamelModel):
    """Update parcial; apenas campos enviados são aplicados."""

    webhook_url: str | None = Field(default=None, alias="webhookUrl")
    webhook_events: list[str] | None = Field(default=None, alias="webhookEvents")


class WebhookTestRequest(_CamelModel):
    event: str | None = Field(default=None, description="Tag do evento sintético.")


class SendTextRequest(_CamelModel):
    to: str = Field(..., min_length=1, description="Destinatário (telefone ou JID).")
    text: str = Field(..., min_length=1)
    quoted: str | None = Field(default=None, description="Id da mensagem citada.")


class EditMessageRequest(_CamelModel):
    message_id: str = Field(..., alias="messageId", min_length=1)
    text: str = Field(..., min_length=1)


class ReactionRequest(_CamelModel):
    message_id: str = Field(..., alias="messageId", min_length=1)
    emoji: str = Field(..., description="Emoji da reação (vazio remove).")


class CheckNumberRequest(_CamelModel):
    phone: str = Field(..., min_length=1)


class PresenceRequest(_CamelModel):
    status: Literal["available", "unavailable", "composing", "recording", "paused"]
