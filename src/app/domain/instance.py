"""Registro de instância (conta de mensageria de um tenant).

Mutado apenas pelo InstanceRegistry (config de webhook) e pelo
ConnectionController (estado de conexão).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from fsm.states import DEFAULT_INITIAL_STATE, ConnectionState

INSTANCE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,50}$")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def is_valid_instance_id(instance_id: str) -> bool:
    """Verifica se o id casa com o padrão de identidade."""
    return bool(INSTANCE_ID_PATTERN.fullmatch(instance_id))


@dataclass(slots=True)
class Instance:
    """Instância registrada.

    Atributos:
        instance_id: Identificador opaco e único
        state: Estado de conexão atual
        webhook_url: URL de entrega (None = webhooks desativados)
        webhook_events: Tags assinadas, ordenadas e sem duplicatas
        phone_number: Conta pareada (só quando conectada)
        connected_at: Momento da conexão (só quando conectada)
    """

    instance_id: str
    state: ConnectionState = DEFAULT_INITIAL_STATE
    webhook_url: str | None = None
    webhook_events: list[str] = field(default_factory=list)
    phone_number: str | None = None
    connected_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    last_activity: datetime = field(default_factory=_utcnow)

    @property
    def webhook_enabled(self) -> bool:
        return bool(self.webhook_url)

    def touch(self) -> None:
        self.last_activity = _utcnow()

    def apply_state(self, state: ConnectionState, phone_number: str | None = None) -> None:
        """Aplica novo estado mantendo phone/connected_at coerentes.

        phone_number e connected_at só existem em CONNECTED.
        """
        self.state = state
        if state is ConnectionState.CONNECTED:
            self.phone_number = phone_number
            self.connected_at = _utcnow()
        else:
            self.phone_number = None
            self.connected_at = None
        self.touch()

    def configure_webhook(self, url: str | None, events: list[str]) -> None:
        self.webhook_url = url or None
        self.webhook_events = list(events)
        self.touch()

    def status_dict(self) -> dict[str, Any]:
        """Resumo de conexão (GET /instances/{id}/status)."""
        return {
            "instanceId": self.instance_id,
            "status": self.state.value,
            "phoneNumber": self.phone_number,
            "connectedAt": _iso(self.connected_at),
        }

    def to_dict(self) -> dict[str, Any]:
        """Forma serializada (camelCase, timestamps ISO-8601 UTC)."""
        return {
            "instanceId": self.instance_id,
            "status": self.state.value,
            "webhookUrl": self.webhook_url,
            "webhookEvents": list(self.webhook_events),
            "webhookEnabled": self.webhook_enabled,
            "createdAt": _iso(self.created_at),
            "lastActivity": _iso(self.last_activity),
            "connectedAt": _iso(self.connected_at),
            "phoneNumber": self.phone_number,
        }


__all__ = ["INSTANCE_ID_PATTERN", "Instance", "is_valid_instance_id"]
