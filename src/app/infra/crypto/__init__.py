"""Assinatura e verificação de webhooks (HMAC-SHA256)."""

from .signature import (
    DEFAULT_MAX_AGE_MS,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    USER_AGENT,
    build_signed_headers,
    sign_payload,
    verify_signature,
)

__all__ = [
    "DEFAULT_MAX_AGE_MS",
    "SIGNATURE_HEADER",
    "TIMESTAMP_HEADER",
    "USER_AGENT",
    "build_signed_headers",
    "sign_payload",
    "verify_signature",
]
