"""Testes do provider stub (pareamento simulado e sessão em disco)."""

from __future__ import annotations

from pathlib import Path

import pytest

from app.infra.providers import StubConnectionProvider
from app.protocols.connection_provider import ProviderEvent, ProviderNotConnectedError


class _Recorder:
    def __init__(self) -> None:
        self.events: list[ProviderEvent] = []

    async def __call__(self, event: ProviderEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [event.type for event in self.events]


def _provider(tmp_path: Path, **kwargs: object) -> tuple[StubConnectionProvider, _Recorder]:
    provider = StubConnectionProvider("bot-1", session_path=tmp_path, **kwargs)
    recorder = _Recorder()
    provider.on_event(recorder)
    return provider, recorder


@pytest.mark.asyncio
async def test_first_connect_requires_pairing(tmp_path: Path) -> None:
    provider, recorder = _provider(tmp_path)

    await provider.connect()

    assert recorder.types == ["qr"]
    assert not provider.is_connected
    assert not provider.has_session()


@pytest.mark.asyncio
async def test_pairing_persists_session(tmp_path: Path) -> None:
    provider, recorder = _provider(tmp_path)
    await provider.connect()

    await provider.complete_pairing()

    assert recorder.types == ["qr", "ready"]
    assert provider.is_connected
    assert provider.has_session()
    assert recorder.events[-1].data["phoneNumber"] == provider.phone_number


@pytest.mark.asyncio
async def test_auto_pair(tmp_path: Path) -> None:
    provider, recorder = _provider(tmp_path, auto_pair=True, pairing_delay_ms=0)

    await provider.connect()

    assert recorder.types == ["qr", "ready"]


@pytest.mark.asyncio
async def test_saved_session_reconnects_without_qr(tmp_path: Path) -> None:
    provider, _ = _provider(tmp_path, auto_pair=True, pairing_delay_ms=0)
    await provider.connect()
    await provider.disconnect()

    second, recorder = _provider(tmp_path)
    await second.connect()

    assert recorder.types == ["ready"]


@pytest.mark.asyncio
async def test_logout_requires_new_pairing(tmp_path: Path) -> None:
    provider, recorder = _provider(tmp_path, auto_pair=True, pairing_delay_ms=0)
    await provider.connect()

    await provider.logout()

    assert not provider.is_connected
    assert not provider.has_session()

    recorder.events.clear()
    await provider.connect()
    assert recorder.types[0] == "qr"


@pytest.mark.asyncio
async def test_logout_when_not_connected_raises(tmp_path: Path) -> None:
    provider, _ = _provider(tmp_path)
    with pytest.raises(ProviderNotConnectedError):
        await provider.logout()


@pytest.mark.asyncio
async def test_actions_require_connection(tmp_path: Path) -> None:
    provider, _ = _provider(tmp_path)
    with pytest.raises(ProviderNotConnectedError):
        await provider.send_text("5511999999999", "oi")


@pytest.mark.asyncio
async def test_clear_session(tmp_path: Path) -> None:
    provider, _ = _provider(tmp_path, auto_pair=True, pairing_delay_ms=0)
    assert provider.clear_session() is False

    await provider.connect()

    assert provider.clear_session() is True
    assert not provider.has_session()
    assert provider.is_connected


@pytest.mark.asyncio
async def test_connection_drop_emits_reconnecting_then_ready(tmp_path: Path) -> None:
    provider, recorder = _provider(tmp_path, auto_pair=True, pairing_delay_ms=0)
    await provider.connect()
    recorder.events.clear()

    await provider.simulate_connection_drop()

    assert recorder.types == ["reconnecting", "ready"]


@pytest.mark.asyncio
async def test_incoming_message_is_emitted(tmp_path: Path) -> None:
    provider, recorder = _provider(tmp_path, auto_pair=True, pairing_delay_ms=0)
    with pytest.raises(ProviderNotConnectedError):
        await provider.simulate_incoming_message("5511911112222", "oi")

    await provider.connect()
    await provider.simulate_incoming_message("5511911112222", "oi")

    event = recorder.events[-1]
    assert event.type == "message"
    assert event.data["from"] == "5511911112222"
    assert event.data["text"] == "oi"
