"""Agregador de settings do Miaw API.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

from config.settings.api import (
    DEFAULT_API_KEY,
    ApiSettings,
    get_api_settings,
)
from config.settings.base import (
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.webhook import (
    DEFAULT_WEBHOOK_SECRET,
    WebhookSettings,
    get_webhook_settings,
)

__all__ = [
    "DEFAULT_API_KEY",
    "DEFAULT_WEBHOOK_SECRET",
    "ApiSettings",
    "BaseSettings",
    "Environment",
    "WebhookSettings",
    "get_api_settings",
    "get_base_settings",
    "get_webhook_settings",
]
