"""Settings de entrega de webhooks.

Segredo de assinatura, timeout por tentativa e política de retry.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_WEBHOOK_SECRET = "webhook-secret"


@dataclass(frozen=True)
class WebhookSettings:
    """Configurações do dispatcher de webhooks.

    Attributes:
        secret: Segredo HMAC usado na assinatura
        timeout_ms: Timeout de cada tentativa de entrega
        max_retries: Total máximo de tentativas por evento
        retry_delay_ms: Atraso base do backoff exponencial
        backoff_factor: Fator multiplicativo a cada nova tentativa
    """

    secret: str = DEFAULT_WEBHOOK_SECRET
    timeout_ms: int = 10_000
    max_retries: int = 6
    retry_delay_ms: int = 60_000
    backoff_factor: float = 2.0

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def retry_delay_for(self, attempt_number: int) -> int:
        """Atraso (ms) antes da tentativa seguinte a `attempt_number`."""
        return int(self.retry_delay_ms * self.backoff_factor ** (attempt_number - 1))

    def validate(self) -> list[str]:
        """Valida configurações de webhook.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.secret:
            errors.append("API_WEBHOOK_SECRET não pode ser vazio")

        if self.timeout_ms <= 0:
            errors.append("WEBHOOK_TIMEOUT_MS deve ser > 0")

        if self.max_retries < 1:
            errors.append("WEBHOOK_MAX_RETRIES deve ser >= 1")

        if self.retry_delay_ms < 0:
            errors.append("WEBHOOK_RETRY_DELAY_MS deve ser >= 0")

        if self.backoff_factor < 1:
            errors.append("WEBHOOK_BACKOFF_FACTOR deve ser >= 1")

        return errors

    def security_warnings(self) -> dict[str, str]:
        """Alertas de configuração insegura por variável."""
        if self.secret == DEFAULT_WEBHOOK_SECRET:
            return {
                "API_WEBHOOK_SECRET": (
                    "Using default webhook secret. "
                    "Set API_WEBHOOK_SECRET environment variable for production."
                )
            }
        return {}


def _load_from_env() -> WebhookSettings:
    """Carrega WebhookSettings a partir de variáveis de ambiente."""
    return WebhookSettings(
        secret=os.getenv("API_WEBHOOK_SECRET", DEFAULT_WEBHOOK_SECRET),
        timeout_ms=int(os.getenv("WEBHOOK_TIMEOUT_MS", "10000")),
        max_retries=int(os.getenv("WEBHOOK_MAX_RETRIES", "6")),
        retry_delay_ms=int(os.getenv("WEBHOOK_RETRY_DELAY_MS", "60000")),
        backoff_factor=float(os.getenv("WEBHOOK_BACKOFF_FACTOR", "2")),
    )


@lru_cache(maxsize=1)
def get_webhook_settings() -> WebhookSettings:
    """Retorna instância cacheada de WebhookSettings."""
    return _load_from_env()
