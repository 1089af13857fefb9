"""Contrato do provider de conexão (engine de protocolo externa).

O core só conhece esta interface: conectar, desconectar, assinar
eventos e executar as ações que exigem conexão ativa.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

# Tags de evento emitidas pelo provider
PROVIDER_EVENT_TYPES = frozenset(
    {
        "qr",
        "ready",
        "disconnected",
        "reconnecting",
        "error",
        "message",
        "message_edit",
        "message_delete",
        "message_reaction",
        "presence",
    }
)


class ProviderError(Exception):
    """Falha reportada pelo provider.

    Attributes:
        code: Código estável do erro
        details: Contexto adicional (sem PII)
        retryable: Se a operação pode ser repetida
    """

    def __init__(
        self,
        message: str,
        code: str = "PROVIDER_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.retryable = retryable


class ProviderNotConnectedError(ProviderError):
    """Operação exige sessão conectada no provider."""

    def __init__(self, message: str = "Instance is not connected") -> None:
        super().__init__(message, code="NOT_CONNECTED", retryable=True)


@dataclass(frozen=True, slots=True)
class ProviderEvent:
    """Evento emitido pelo provider (ex: qr, ready, message)."""

    type: str
    data: dict[str, Any] = field(default_factory=dict)


ProviderEventHandler = Callable[[ProviderEvent], Awaitable[None]]


class ConnectionProviderProtocol(Protocol):
    """Capacidades mínimas do provider de uma instância."""

    @property
    def phone_number(self) -> str | None: ...

    def on_event(self, handler: ProviderEventHandler) -> None: ...

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def logout(self) -> None: ...

    async def dispose(self) -> None: ...

    def clear_session(self) -> bool: ...

    async def send_text(
        self, to: str, text: str, quoted: str | None = None
    ) -> dict[str, Any]: ...

    async def edit_message(self, message_id: str, text: str) -> dict[str, Any]: ...

    async def delete_message(self, message_id: str) -> dict[str, Any]: ...

    async def send_reaction(self, message_id: str, emoji: str) -> dict[str, Any]: ...

    async def check_number(self, phone: str) -> dict[str, Any]: ...

    async def set_presence(self, status: str) -> dict[str, Any]: ...


ConnectionProviderFactory = Callable[[str], ConnectionProviderProtocol]
