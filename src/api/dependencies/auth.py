"""Autenticação por API key.

Aceita `Authorization: Bearer <key>` ou `X-API-Key: <key>`.
A chave esperada vem das settings guardadas em app.state.
"""

from __future__ import annotations

import hmac

from fastapi import Header, Request

from utils.errors import UnauthorizedError


def _extract_key(authorization: str | None, x_api_key: str | None) -> str | None:
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    if x_api_key:
        return x_api_key
    return None


async def require_api_key(
    request: Request,
    authorization: str | None = Header(default=None),
    x_api_key: str | None = Header(default=None),
) -> None:
    """Dependency que rejeita requisições sem credencial válida (401)."""
    provided = _extract_key(authorization, x_api_key)
    if provided is None:
        raise UnauthorizedError("Missing API key")

    expected = request.app.state.services.api_settings.api_key
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        raise UnauthorizedError("Invalid API key")
