"""Cliente HTTP de entrega de webhooks.

Faz uma única tentativa por chamada; retry e backoff ficam no
dispatcher, que conhece a ordem da fila.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

import httpx

from app.infra.crypto.signature import build_signed_headers

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SendResult:
    """Resultado de uma tentativa de POST."""

    ok: bool
    status_code: int | None = None
    error: str | None = None
    latency_ms: float = 0.0


class WebhookSender:
    """POST assinado para a URL do assinante.

    Args:
        secret: Segredo HMAC de assinatura
        timeout_seconds: Teto de duração de cada tentativa (conexão + resposta)
        transport: Transport httpx opcional (testes usam MockTransport)
    """

    def __init__(
        self,
        secret: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret = secret
        self._timeout = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    async def send(self, url: str, body: bytes, timestamp_ms: int) -> SendResult:
        """Envia o corpo assinado. Nunca levanta erro de rede."""
        headers = build_signed_headers(body, self._secret, timestamp_ms)
        started = time.perf_counter()
        try:
            # Teto da tentativa inteira; o Timeout do httpx vale por fase
            async with asyncio.timeout(self._timeout):
                response = await self._get_client().post(url, content=body, headers=headers)
        except (TimeoutError, httpx.TimeoutException):
            return SendResult(
                ok=False,
                error="timeout",
                latency_ms=(time.perf_counter() - started) * 1000,
            )
        except httpx.HTTPError as exc:
            return SendResult(
                ok=False,
                error=type(exc).__name__,
                latency_ms=(time.perf_counter() - started) * 1000,
            )

        latency_ms = (time.perf_counter() - started) * 1000
        if response.is_success:
            return SendResult(ok=True, status_code=response.status_code, latency_ms=latency_ms)
        return SendResult(
            ok=False,
            status_code=response.status_code,
            error=f"http_{response.status_code}",
            latency_ms=latency_ms,
        )

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
