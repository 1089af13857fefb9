"""Modelos de webhook: evento, tentativa de entrega e contadores."""

from __future__ import annotations

import itertools
import json
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

RECOGNIZED_EVENTS: tuple[str, ...] = (
    "qr",
    "ready",
    "message",
    "message_edit",
    "message_delete",
    "message_reaction",
    "presence",
    "connection",
    "disconnected",
    "reconnecting",
    "error",
)

# Aceito apenas pelo caminho de teste de webhook
TEST_EVENT = "test"
TEST_EVENT_MESSAGE = "This is a test webhook from Miaw API"

_sequence = itertools.count(1)
_clock_lock = threading.Lock()
_last_timestamp_ms = 0


def now_ms() -> int:
    """Epoch em milissegundos, nunca decrescente dentro do processo."""
    global _last_timestamp_ms
    with _clock_lock:
        current = max(int(time.time() * 1000), _last_timestamp_ms)
        _last_timestamp_ms = current
        return current


def is_recognized_event(event_type: str) -> bool:
    return event_type in RECOGNIZED_EVENTS


def dedupe_events(events: list[str]) -> list[str]:
    """Remove duplicatas preservando a ordem informada."""
    return list(dict.fromkeys(events))


class DeliveryOutcome(Enum):
    """Resultado de uma tentativa de entrega."""

    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED_PERMANENT = "failed_permanent"


@dataclass(frozen=True, slots=True)
class WebhookEvent:
    """Evento imutável enfileirado para entrega.

    Atributos:
        event_type: Tag do evento (ex: "message")
        instance_id: Instância de origem
        data: Payload do evento
        timestamp: Epoch ms de criação
        sequence: Contador global do processo (ordem/diagnóstico)
    """

    event_type: str
    instance_id: str
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: int = field(default_factory=now_ms)
    sequence: int = field(default_factory=lambda: next(_sequence))

    def to_wire(self) -> dict[str, Any]:
        return {
            "event": self.event_type,
            "instanceId": self.instance_id,
            "timestamp": self.timestamp,
            "data": self.data,
        }

    def to_bytes(self) -> bytes:
        """Corpo JSON compacto, exatamente o que é assinado e enviado."""
        return json.dumps(
            self.to_wire(),
            separators=(",", ":"),
            ensure_ascii=False,
            default=str,
        ).encode("utf-8")


@dataclass(slots=True)
class DeliveryAttempt:
    """Estado de entrega de um evento (pertence a um único worker)."""

    event: WebhookEvent
    url: str
    attempt_number: int = 1
    next_retry_at: int | None = None
    outcome: DeliveryOutcome = DeliveryOutcome.PENDING
    last_error: str | None = None
    last_status_code: int | None = None


@dataclass(slots=True)
class WebhookStats:
    """Contadores de entrega de uma instância."""

    queued: int = 0
    delivered: int = 0
    failed: int = 0
    last_delivery_time: int | None = None
    last_failure_time: int | None = None

    def copy(self) -> WebhookStats:
        return WebhookStats(
            queued=self.queued,
            delivered=self.delivered,
            failed=self.failed,
            last_delivery_time=self.last_delivery_time,
            last_failure_time=self.last_failure_time,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "queued": self.queued,
            "delivered": self.delivered,
            "failed": self.failed,
            "lastDeliveryTime": self.last_delivery_time,
            "lastFailureTime": self.last_failure_time,
        }


__all__ = [
    "RECOGNIZED_EVENTS",
    "TEST_EVENT",
    "TEST_EVENT_MESSAGE",
    "DeliveryAttempt",
    "DeliveryOutcome",
    "WebhookEvent",
    "WebhookStats",
    "dedupe_events",
    "is_recognized_event",
    "now_ms",
]
