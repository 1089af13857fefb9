"""Middleware de correlation_id e latência por requisição."""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.observability import (
    CORRELATION_HEADER,
    get_correlation_id,
    record_latency,
    reset_correlation_id,
    set_correlation_id,
)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Define o correlation_id do contexto e devolve no header de resposta."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        token = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        correlation_id = get_correlation_id()
        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        finally:
            record_latency(
                "http",
                f"{request.method} {request.url.path}",
                (time.perf_counter() - started) * 1000,
                correlation_id,
            )
            reset_correlation_id(token)
