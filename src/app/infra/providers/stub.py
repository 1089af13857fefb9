"""Provider de conexão simulado: apenas para desenvolvimento e testes.

ATENÇÃO: não fala com a rede de mensageria. Simula o ciclo de
pareamento (qr → ready) e persiste um marcador de sessão em disco
para que logout exija novo pareamento.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import shutil
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from app.protocols.connection_provider import (
    ProviderEvent,
    ProviderEventHandler,
    ProviderNotConnectedError,
)

logger = logging.getLogger(__name__)

SESSION_FILE = "session.json"


def _fake_phone_number(instance_id: str) -> str:
    """Número determinístico derivado do id (não é um número real)."""
    digest = int(hashlib.sha256(instance_id.encode()).hexdigest(), 16)
    return f"55{digest % 10**11:011d}"


class StubConnectionProvider:
    """Provider em memória com sessão em arquivo.

    Args:
        instance_id: Instância dona do provider
        session_path: Diretório raiz das sessões
        auto_pair: Conclui o pareamento sozinho após emitir o QR
        pairing_delay_ms: Atraso simulado entre QR e ready
    """

    def __init__(
        self,
        instance_id: str,
        session_path: str | Path,
        auto_pair: bool = False,
        pairing_delay_ms: int = 2000,
    ) -> None:
        self._instance_id = instance_id
        self._session_dir = Path(session_path) / instance_id
        self._auto_pair = auto_pair
        self._pairing_delay = pairing_delay_ms / 1000
        self._handlers: list[ProviderEventHandler] = []
        self._connected = False
        self._awaiting_pairing = False
        self._phone_number: str | None = None

    @property
    def phone_number(self) -> str | None:
        return self._phone_number

    @property
    def is_connected(self) -> bool:
        return self._connected

    def on_event(self, handler: ProviderEventHandler) -> None:
        self._handlers.append(handler)

    async def _emit(self, event_type: str, data: dict[str, Any] | None = None) -> None:
        event = ProviderEvent(type=event_type, data=data or {})
        for handler in list(self._handlers):
            await handler(event)

    # Sessão persistida

    def _session_file(self) -> Path:
        return self._session_dir / SESSION_FILE

    def _load_session(self) -> dict[str, Any] | None:
        path = self._session_file()
        if not path.is_file():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning(
                "stub_session_unreadable",
                extra={"instance_id": self._instance_id},
            )
            return None

    def _save_session(self, phone_number: str) -> None:
        self._session_dir.mkdir(parents=True, exist_ok=True)
        payload = {
            "phoneNumber": phone_number,
            "pairedAt": datetime.now(UTC).isoformat(),
        }
        self._session_file().write_text(json.dumps(payload), encoding="utf-8")

    def has_session(self) -> bool:
        return self._session_file().is_file()

    def clear_session(self) -> bool:
        """Remove a sessão persistida sem desconectar."""
        if not self._session_dir.exists():
            return False
        shutil.rmtree(self._session_dir, ignore_errors=True)
        logger.info("stub_session_cleared", extra={"instance_id": self._instance_id})
        return True

    # Ciclo de vida

    async def connect(self) -> None:
        if self._connected:
            return

        session = self._load_session()
        if session and session.get("phoneNumber"):
            await self._become_ready(str(session["phoneNumber"]))
            return

        self._awaiting_pairing = True
        await self._emit("qr", {"qr": f"stub-qr:{self._instance_id}:{uuid.uuid4().hex}"})

        if self._auto_pair:
            await asyncio.sleep(self._pairing_delay)
            await self.complete_pairing()

    async def complete_pairing(self) -> None:
        """Simula a leitura do QR pelo aparelho."""
        if not self._awaiting_pairing:
            return
        phone_number = _fake_phone_number(self._instance_id)
        self._save_session(phone_number)
        await self._become_ready(phone_number)

    async def _become_ready(self, phone_number: str) -> None:
        self._awaiting_pairing = False
        self._connected = True
        self._phone_number = phone_number
        await self._emit("ready", {"phoneNumber": phone_number})

    async def simulate_connection_drop(self, reason: str = "connection_lost") -> None:
        """Simula queda de conexão seguida de reconexão automática."""
        if not self._connected:
            return
        await self._emit("reconnecting", {"attempt": 1, "reason": reason})
        await self._become_ready(self._phone_number or _fake_phone_number(self._instance_id))

    async def simulate_incoming_message(self, sender: str, text: str) -> None:
        if not self._connected:
            raise ProviderNotConnectedError()
        await self._emit(
            "message",
            {"id": uuid.uuid4().hex.upper(), "from": sender, "text": text},
        )

    async def disconnect(self) -> None:
        self._connected = False
        self._awaiting_pairing = False
        self._phone_number = None

    async def logout(self) -> None:
        if not self._connected:
            raise ProviderNotConnectedError()
        await self.disconnect()
        self.clear_session()

    async def dispose(self) -> None:
        await self.disconnect()
        logger.debug("stub_provider_disposed", extra={"instance_id": self._instance_id})

    # Ações que exigem conexão

    def _require_connected(self) -> None:
        if not self._connected:
            raise ProviderNotConnectedError()

    async def send_text(
        self, to: str, text: str, quoted: str | None = None
    ) -> dict[str, Any]:
        self._require_connected()
        return {"messageId": uuid.uuid4().hex.upper(), "to": to, "quoted": quoted}

    async def edit_message(self, message_id: str, text: str) -> dict[str, Any]:
        self._require_connected()
        return {"messageId": message_id, "edited": True}

    async def delete_message(self, message_id: str) -> dict[str, Any]:
        self._require_connected()
        return {"messageId": message_id, "deleted": True}

    async def send_reaction(self, message_id: str, emoji: str) -> dict[str, Any]:
        self._require_connected()
        return {"messageId": message_id, "reaction": emoji}

    async def check_number(self, phone: str) -> dict[str, Any]:
        self._require_connected()
        digits = "".join(ch for ch in phone if ch.isdigit())
        return {"phone": digits, "exists": len(digits) >= 10}

    async def set_presence(self, status: str) -> dict[str, Any]:
        self._require_connected()
        return {"presence": status}
