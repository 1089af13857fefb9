"""Assinatura HMAC-SHA256 dos webhooks de saída.

Formato: header `X-Miaw-Signature: sha256=<hex>` calculado sobre
`"{timestamp}.{payload}"`, com o timestamp em epoch ms enviado em
`X-Miaw-Timestamp`. O payload assinado é exatamente o corpo enviado.
"""

from __future__ import annotations

import hashlib
import hmac
import re
import time

SIGNATURE_HEADER = "X-Miaw-Signature"
TIMESTAMP_HEADER = "X-Miaw-Timestamp"
USER_AGENT = "Miaw-Webhook/1.0"

# Janela de replay: 5 minutos
DEFAULT_MAX_AGE_MS = 300_000

_SIGNATURE_FORMAT = re.compile(r"^sha256=[0-9a-f]{64}$")


def _digest(payload: bytes, timestamp_ms: int, secret: str) -> str:
    message = f"{timestamp_ms}.".encode() + payload
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def sign_payload(payload: bytes, timestamp_ms: int, secret: str) -> str:
    """Gera o valor do header de assinatura.

    Args:
        payload: Corpo JSON em bytes
        timestamp_ms: Epoch ms incluído no header de timestamp
        secret: Segredo compartilhado com o receptor

    Returns:
        "sha256=" seguido de 64 hex minúsculos
    """
    return f"sha256={_digest(payload, timestamp_ms, secret)}"


def verify_signature(
    payload: bytes,
    timestamp_ms: int,
    signature: str,
    secret: str,
    now_ms: int | None = None,
    max_age_ms: int = DEFAULT_MAX_AGE_MS,
) -> bool:
    """Valida assinatura e janela de replay.

    Returns:
        False se o header estiver malformado, se o timestamp for mais
        antigo que max_age_ms ou se o HMAC não conferir.
    """
    if not _SIGNATURE_FORMAT.fullmatch(signature):
        return False

    now = int(time.time() * 1000) if now_ms is None else now_ms
    if now - timestamp_ms > max_age_ms:
        return False

    computed = _digest(payload, timestamp_ms, secret)
    return hmac.compare_digest(computed, signature[7:])


def build_signed_headers(payload: bytes, secret: str, timestamp_ms: int) -> dict[str, str]:
    """Headers completos de uma entrega assinada."""
    return {
        "Content-Type": "application/json",
        SIGNATURE_HEADER: sign_payload(payload, timestamp_ms, secret),
        TIMESTAMP_HEADER: str(timestamp_ms),
        "User-Agent": USER_AGENT,
    }
