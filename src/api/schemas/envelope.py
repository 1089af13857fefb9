"""Envelope de sucesso `{"success": true, ...}`."""

from __future__ import annotations

from typing import Any

_MISSING: Any = object()


def success_response(data: Any = _MISSING, message: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not _MISSING:
        body["data"] = data
    return body
