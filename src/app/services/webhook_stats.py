"""Contadores de entrega de webhook por instância.

Escritas sob lock; leitores recebem cópia (snapshot). Contadores
nunca decrescem, exceto no reset de (re)criação da instância.
"""

from __future__ import annotations

import threading

from app.domain.webhook import WebhookStats, now_ms


class WebhookStatsTracker:
    """Registro thread-safe de WebhookStats por instance_id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stats: dict[str, WebhookStats] = {}

    def reset(self, instance_id: str) -> None:
        with self._lock:
            self._stats[instance_id] = WebhookStats()

    def discard(self, instance_id: str) -> None:
        with self._lock:
            self._stats.pop(instance_id, None)

    def _entry(self, instance_id: str) -> WebhookStats:
        # Chamado sempre com o lock adquirido
        stats = self._stats.get(instance_id)
        if stats is None:
            stats = self._stats[instance_id] = WebhookStats()
        return stats

    def record_queued(self, instance_id: str) -> None:
        with self._lock:
            self._entry(instance_id).queued += 1

    def record_delivered(self, instance_id: str) -> None:
        with self._lock:
            stats = self._entry(instance_id)
            stats.delivered += 1
            stats.last_delivery_time = now_ms()

    def record_failed(self, instance_id: str) -> None:
        with self._lock:
            stats = self._entry(instance_id)
            stats.failed += 1
            stats.last_failure_time = now_ms()

    def snapshot(self, instance_id: str) -> WebhookStats:
        """Cópia dos contadores (zerados se a instância não tem registro)."""
        with self._lock:
            stats = self._stats.get(instance_id)
            return stats.copy() if stats is not None else WebhookStats()
