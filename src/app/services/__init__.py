"""Serviços de aplicação.

Orquestração do ciclo de vida das instâncias e da entrega de webhooks.
Implementações concretas de IO ficam em app/infra/.
"""

from app.services.connection_controller import ConnectionController
from app.services.instance_registry import InstanceRegistry
from app.services.webhook_dispatcher import WebhookDispatcher, WebhookTarget
from app.services.webhook_stats import WebhookStatsTracker

__all__ = [
    "ConnectionController",
    "InstanceRegistry",
    "WebhookDispatcher",
    "WebhookStatsTracker",
    "WebhookTarget",
]
