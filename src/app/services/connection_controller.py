"""Controlador de conexão de uma instância.

Une a FSM de conexão, o provider e o dispatcher de webhooks:
- operações de ciclo de vida (connect, disconnect, restart, logout, dispose)
- tradução de eventos do provider em transições de estado
- gate de estado para ações que exigem conexão

O controller nunca faz IO de webhook; apenas chama `enqueue`,
que não bloqueia.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from app.domain.instance import Instance
from app.domain.webhook import WebhookEvent
from app.observability import record_state_transition
from app.protocols.connection_provider import (
    PROVIDER_EVENT_TYPES,
    ConnectionProviderProtocol,
    ProviderEvent,
    ProviderNotConnectedError,
)
from fsm import ConnectionState, ConnectionStateMachine
from utils.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

EventSink = Callable[[str, WebhookEvent], Any]

NOT_CONNECTED_MESSAGE = "Instance is not connected"


class ConnectionController:
    """Ciclo de vida de conexão de uma instância.

    Args:
        instance: Registro mutável da instância
        provider: Provider de conexão desta instância
        emit: Sink de eventos (WebhookDispatcher.enqueue)
    """

    def __init__(
        self,
        instance: Instance,
        provider: ConnectionProviderProtocol,
        emit: EventSink,
    ) -> None:
        self._instance = instance
        self._provider = provider
        self._emit_sink = emit
        self._fsm = ConnectionStateMachine(
            instance_id=instance.instance_id,
            initial_state=instance.state,
        )
        self._connect_task: asyncio.Task[None] | None = None
        provider.on_event(self.handle_provider_event)

    @property
    def instance(self) -> Instance:
        return self._instance

    @property
    def provider(self) -> ConnectionProviderProtocol:
        return self._provider

    @property
    def state(self) -> ConnectionState:
        return self._fsm.current_state

    @property
    def state_machine(self) -> ConnectionStateMachine:
        return self._fsm

    # Emissão

    def _emit(self, event_type: str, data: dict[str, Any] | None = None) -> None:
        event = WebhookEvent(
            event_type=event_type,
            instance_id=self._instance.instance_id,
            data=data or {},
        )
        self._emit_sink(self._instance.instance_id, event)

    def _move_to(
        self,
        target: ConnectionState,
        trigger: str,
        *,
        phone_number: str | None = None,
        reason: str | None = None,
    ) -> bool:
        """Aplica transição e emite os eventos derivados.

        Returns:
            False se já estava no estado alvo ou a transição foi negada.
        """
        previous = self._fsm.current_state
        if previous is target:
            return False

        result = self._fsm.transition(target, trigger)
        if not result.success:
            logger.warning(
                "connection_transition_rejected",
                extra={
                    "instance_id": self._instance.instance_id,
                    "from_state": previous.value,
                    "to_state": target.value,
                    "trigger": trigger,
                    "reason": result.error_reason,
                },
            )
            return False

        self._instance.apply_state(target, phone_number=phone_number)
        record_state_transition(
            self._instance.instance_id, previous.value, target.value, trigger
        )
        logger.info(
            "connection_state_changed",
            extra={
                "instance_id": self._instance.instance_id,
                "from_state": previous.value,
                "to_state": target.value,
                "trigger": trigger,
            },
        )

        self._emit(
            "connection",
            {"state": target.value, "previousState": previous.value, "trigger": trigger},
        )
        if target is ConnectionState.CONNECTED:
            self._emit(
                "ready",
                {
                    "phoneNumber": self._instance.phone_number,
                    "connectedAt": self._instance.to_dict()["connectedAt"],
                },
            )
        elif target is ConnectionState.DISCONNECTED:
            self._emit("disconnected", {"reason": reason or trigger})
        elif previous is ConnectionState.CONNECTED:
            self._emit("reconnecting", {"attempt": 1})
        return True

    # Eventos do provider

    async def handle_provider_event(self, event: ProviderEvent) -> None:
        """Traduz evento do provider em transição e/ou webhook."""
        if event.type not in PROVIDER_EVENT_TYPES:
            logger.debug(
                "provider_event_ignored",
                extra={"instance_id": self._instance.instance_id, "event_type": event.type},
            )
            return

        if event.type == "ready":
            phone = event.data.get("phoneNumber") or self._provider.phone_number
            if not phone:
                # Sem número não há conta pareada: permanece em connecting
                logger.warning(
                    "provider_ready_without_phone",
                    extra={"instance_id": self._instance.instance_id},
                )
                return
            if self._fsm.current_state is ConnectionState.DISCONNECTED:
                self._move_to(ConnectionState.CONNECTING, "provider_ready")
            self._move_to(ConnectionState.CONNECTED, "provider_ready", phone_number=str(phone))
        elif event.type == "disconnected":
            self._move_to(
                ConnectionState.DISCONNECTED,
                "provider_disconnected",
                reason=str(event.data.get("reason", "provider_disconnected")),
            )
        elif event.type == "reconnecting":
            if self._fsm.current_state is ConnectionState.CONNECTED:
                self._move_to(ConnectionState.CONNECTING, "provider_reconnecting")
            else:
                self._emit("reconnecting", dict(event.data))
        else:
            # qr, error, message*, presence: repassados sem mudança de estado
            self._instance.touch()
            self._emit(event.type, dict(event.data))

    # Ciclo de vida

    async def connect(self) -> ConnectionState:
        """Inicia conexão em background e retorna o estado atual."""
        if self._fsm.current_state is not ConnectionState.DISCONNECTED:
            return self._fsm.current_state

        self._move_to(ConnectionState.CONNECTING, "connect_requested")
        self._connect_task = asyncio.create_task(
            self._run_connect(),
            name=f"provider-connect:{self._instance.instance_id}",
        )
        self._connect_task.add_done_callback(self._on_connect_done)
        return self._fsm.current_state

    async def _run_connect(self) -> None:
        try:
            await self._provider.connect()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(
                "provider_connect_failed",
                extra={
                    "instance_id": self._instance.instance_id,
                    "error_type": type(exc).__name__,
                },
            )
            self._move_to(ConnectionState.DISCONNECTED, "connect_failed", reason="connect_failed")
            self._emit("error", {"message": "Connection failed", "type": type(exc).__name__})

    def _on_connect_done(self, task: asyncio.Task[None]) -> None:
        if self._connect_task is task:
            self._connect_task = None

    async def _cancel_connect(self) -> None:
        task = self._connect_task
        self._connect_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def wait_connect(self) -> None:
        """Aguarda a tentativa de conexão em andamento (diagnóstico/testes)."""
        task = self._connect_task
        if task is not None:
            await asyncio.shield(task)

    async def disconnect(self) -> ConnectionState:
        """Desconecta; idempotente quando já desconectado."""
        if self._fsm.current_state is ConnectionState.DISCONNECTED:
            return self._fsm.current_state

        await self._cancel_connect()
        try:
            await self._provider.disconnect()
        except Exception as exc:
            # Falha do provider não impede a transição local
            logger.warning(
                "provider_disconnect_failed",
                extra={
                    "instance_id": self._instance.instance_id,
                    "error_type": type(exc).__name__,
                },
            )
        self._move_to(ConnectionState.DISCONNECTED, "disconnect_requested", reason="manual")
        return self._fsm.current_state

    async def restart(self) -> ConnectionState:
        await self.disconnect()
        return await self.connect()

    async def logout(self) -> ConnectionState:
        """Invalida a sessão persistida; a próxima conexão exige pareamento."""
        try:
            await self._provider.logout()
        except ProviderNotConnectedError as exc:
            raise ServiceUnavailableError(exc.message) from exc
        await self._cancel_connect()
        self._move_to(ConnectionState.DISCONNECTED, "logout_requested", reason="logout")
        return self._fsm.current_state

    async def dispose(self) -> ConnectionState:
        """Libera recursos do provider mantendo a sessão em disco."""
        try:
            await self._provider.dispose()
        except ProviderNotConnectedError as exc:
            raise ServiceUnavailableError(exc.message) from exc
        await self._cancel_connect()
        self._move_to(ConnectionState.DISCONNECTED, "dispose_requested", reason="disposed")
        return self._fsm.current_state

    def clear_session(self) -> bool:
        cleared = self._provider.clear_session()
        self._instance.touch()
        return cleared

    async def close(self) -> None:
        """Teardown na remoção da instância: força desconexão e libera o provider."""
        await self._cancel_connect()
        for step in (self._provider.disconnect, self._provider.dispose):
            try:
                await step()
            except Exception as exc:
                logger.warning(
                    "provider_teardown_failed",
                    extra={
                        "instance_id": self._instance.instance_id,
                        "step": step.__name__,
                        "error_type": type(exc).__name__,
                    },
                )
        if self._fsm.current_state is not ConnectionState.DISCONNECTED:
            self._fsm.transition(ConnectionState.DISCONNECTED, "instance_deleted")
            self._instance.apply_state(ConnectionState.DISCONNECTED)

    # Gate de estado

    def require_connected(self) -> None:
        if self._fsm.current_state is not ConnectionState.CONNECTED:
            raise ServiceUnavailableError(NOT_CONNECTED_MESSAGE)

    async def _gated(self, call: Callable[[], Awaitable[T]]) -> T:
        self.require_connected()
        try:
            result = await call()
        except ProviderNotConnectedError as exc:
            raise ServiceUnavailableError(exc.message) from exc
        self._instance.touch()
        return result

    async def send_text(self, to: str, text: str, quoted: str | None = None) -> dict[str, Any]:
        return await self._gated(lambda: self._provider.send_text(to, text, quoted))

    async def edit_message(self, message_id: str, text: str) -> dict[str, Any]:
        return await self._gated(lambda: self._provider.edit_message(message_id, text))

    async def delete_message(self, message_id: str) -> dict[str, Any]:
        return await self._gated(lambda: self._provider.delete_message(message_id))

    async def send_reaction(self, message_id: str, emoji: str) -> dict[str, Any]:
        return await self._gated(lambda: self._provider.send_reaction(message_id, emoji))

    async def check_number(self, phone: str) -> dict[str, Any]:
        return await self._gated(lambda: self._provider.check_number(phone))

    async def set_presence(self, status: str) -> dict[str, Any]:
        return await self._gated(lambda: self._provider.set_presence(status))
