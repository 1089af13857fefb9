"""Dispatcher de webhooks: fila FIFO e worker por instância.

Cada instância tem um asyncio.Queue e um único worker, criados sob
demanda no primeiro evento aceito. Dentro de uma instância a entrega
é estritamente sequencial: o evento da cabeça da fila é retentado no
lugar (com backoff) antes que o próximo seja enviado. Instâncias são
independentes entre si.

Falhas de entrega são tratadas localmente (retry ou descarte) e
nunca chegam ao chamador HTTP que originou o evento.
"""

from __future__ import annotations

import asyncio
import contextlib
import contextvars
import logging
from dataclasses import dataclass
from typing import Any

from app.domain.webhook import (
    RECOGNIZED_EVENTS,
    TEST_EVENT,
    TEST_EVENT_MESSAGE,
    DeliveryAttempt,
    DeliveryOutcome,
    WebhookEvent,
    is_recognized_event,
    now_ms,
)
from app.infra.webhooks.sender import WebhookSender
from app.observability import record_webhook_delivery
from app.services.webhook_stats import WebhookStatsTracker
from config.settings.webhook import WebhookSettings
from utils.errors import BadRequestError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WebhookTarget:
    """Destino configurado de uma instância."""

    url: str | None
    events: tuple[str, ...] = ()

    def accepts(self, event_type: str) -> bool:
        # Lista vazia assina todos os eventos
        return not self.events or event_type in self.events


class WebhookDispatcher:
    """Enfileira, assina e entrega eventos com retry exponencial.

    Args:
        settings: Timeout, retries e backoff
        stats: Contadores por instância
        sender: Cliente HTTP (default: WebhookSender com o segredo das settings)
    """

    def __init__(
        self,
        settings: WebhookSettings,
        stats: WebhookStatsTracker,
        sender: WebhookSender | None = None,
    ) -> None:
        self._settings = settings
        self._stats = stats
        self._sender = sender or WebhookSender(
            secret=settings.secret,
            timeout_seconds=settings.timeout_seconds,
        )
        self._targets: dict[str, WebhookTarget] = {}
        self._queues: dict[str, asyncio.Queue[DeliveryAttempt]] = {}
        self._workers: dict[str, asyncio.Task[None]] = {}

    # Configuração

    def configure(self, instance_id: str, url: str | None, events: list[str]) -> None:
        """Registra (ou substitui) o destino da instância."""
        self._targets[instance_id] = WebhookTarget(url=url or None, events=tuple(events))

    async def unregister(self, instance_id: str) -> None:
        """Remove o destino, cancela o worker e descarta a fila."""
        self._targets.pop(instance_id, None)
        queue = self._queues.pop(instance_id, None)
        worker = self._workers.pop(instance_id, None)

        discarded = queue.qsize() if queue is not None else 0
        if worker is not None and not worker.done():
            worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await worker

        if discarded:
            logger.info(
                "webhook_queue_discarded",
                extra={"instance_id": instance_id, "discarded": discarded},
            )

    # Entrada de eventos

    def enqueue(self, instance_id: str, event: WebhookEvent) -> bool:
        """Aceita o evento para entrega assíncrona. Nunca levanta.

        Returns:
            True se o evento entrou na fila, False se foi descartado.
        """
        target = self._targets.get(instance_id)
        if target is None or not target.url:
            logger.debug(
                "webhook_event_dropped",
                extra={
                    "instance_id": instance_id,
                    "event_type": event.event_type,
                    "reason": "no_webhook_url",
                },
            )
            return False

        if not target.accepts(event.event_type):
            logger.debug(
                "webhook_event_dropped",
                extra={
                    "instance_id": instance_id,
                    "event_type": event.event_type,
                    "reason": "not_subscribed",
                },
            )
            return False

        self._submit(instance_id, DeliveryAttempt(event=event, url=target.url))
        return True

    def test_delivery(self, instance_id: str, event_type: str | None = None) -> WebhookEvent:
        """Entrega um evento sintético ignorando o filtro de assinatura.

        Raises:
            BadRequestError: Sem URL configurada ou tag desconhecida.
        """
        target = self._targets.get(instance_id)
        if target is None or not target.url:
            raise BadRequestError("No webhook URL configured for this instance")

        tag = event_type or TEST_EVENT
        if tag != TEST_EVENT and not is_recognized_event(tag):
            raise BadRequestError(
                f"Unknown event type: {tag}",
                details={"event": tag, "allowed": [TEST_EVENT, *RECOGNIZED_EVENTS]},
            )

        event = WebhookEvent(
            event_type=tag,
            instance_id=instance_id,
            data={"test": True, "message": TEST_EVENT_MESSAGE},
        )
        self._submit(instance_id, DeliveryAttempt(event=event, url=target.url))
        return event

    def _submit(self, instance_id: str, attempt: DeliveryAttempt) -> None:
        queue = self._queues.get(instance_id)
        if queue is None:
            queue = self._queues[instance_id] = asyncio.Queue()
        queue.put_nowait(attempt)
        self._stats.record_queued(instance_id)

        worker = self._workers.get(instance_id)
        if worker is None or worker.done():
            # Contexto limpo: o worker sobrevive à requisição que o criou
            worker = asyncio.create_task(
                self._run_worker(instance_id, queue),
                name=f"webhook-worker:{instance_id}",
                context=contextvars.Context(),
            )
            worker.add_done_callback(self._on_worker_done)
            self._workers[instance_id] = worker

    # Worker

    async def _run_worker(
        self, instance_id: str, queue: asyncio.Queue[DeliveryAttempt]
    ) -> None:
        logger.debug("webhook_worker_started", extra={"instance_id": instance_id})
        while True:
            attempt = await queue.get()
            try:
                await self._deliver(attempt)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(
                    "webhook_delivery_crashed",
                    extra={
                        "instance_id": instance_id,
                        "event_type": attempt.event.event_type,
                        "sequence": attempt.event.sequence,
                    },
                )
            finally:
                queue.task_done()

    async def _deliver(self, attempt: DeliveryAttempt) -> DeliveryAttempt:
        """Entrega o evento da cabeça da fila, retentando no lugar."""
        event = attempt.event
        instance_id = event.instance_id
        body = event.to_bytes()
        max_attempts = self._settings.max_retries

        while True:
            result = await self._sender.send(attempt.url, body, now_ms())

            if result.ok:
                attempt.outcome = DeliveryOutcome.DELIVERED
                attempt.last_status_code = result.status_code
                self._stats.record_delivered(instance_id)
                record_webhook_delivery(
                    instance_id,
                    event.event_type,
                    attempt.attempt_number,
                    "delivered",
                    result.latency_ms,
                    result.status_code,
                )
                logger.info(
                    "webhook_delivered",
                    extra={
                        "instance_id": instance_id,
                        "event_type": event.event_type,
                        "sequence": event.sequence,
                        "attempt": attempt.attempt_number,
                        "status_code": result.status_code,
                    },
                )
                return attempt

            attempt.last_error = result.error
            attempt.last_status_code = result.status_code
            self._stats.record_failed(instance_id)

            if attempt.attempt_number >= max_attempts:
                attempt.outcome = DeliveryOutcome.FAILED_PERMANENT
                record_webhook_delivery(
                    instance_id,
                    event.event_type,
                    attempt.attempt_number,
                    "failed_permanent",
                    result.latency_ms,
                    result.status_code,
                )
                logger.warning(
                    "webhook_delivery_failed_permanently",
                    extra={
                        "instance_id": instance_id,
                        "event_type": event.event_type,
                        "sequence": event.sequence,
                        "attempts": attempt.attempt_number,
                        "last_error": result.error,
                    },
                )
                return attempt

            delay_ms = self._settings.retry_delay_for(attempt.attempt_number)
            attempt.next_retry_at = now_ms() + delay_ms
            record_webhook_delivery(
                instance_id,
                event.event_type,
                attempt.attempt_number,
                "retry",
                result.latency_ms,
                result.status_code,
            )
            logger.info(
                "webhook_retry_scheduled",
                extra={
                    "instance_id": instance_id,
                    "event_type": event.event_type,
                    "sequence": event.sequence,
                    "attempt": attempt.attempt_number,
                    "delay_ms": delay_ms,
                    "last_error": result.error,
                },
            )
            await asyncio.sleep(delay_ms / 1000)
            attempt.attempt_number += 1
            attempt.next_retry_at = None

    def _on_worker_done(self, task: asyncio.Task[None]) -> None:
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "webhook_worker_failed",
                    extra={"task": task.get_name(), "error_type": type(exc).__name__},
                )

    # Diagnóstico

    def status(self, instance_id: str) -> dict[str, Any]:
        target = self._targets.get(instance_id)
        return {
            "instanceId": instance_id,
            "webhookUrl": target.url if target else None,
            "webhookEvents": list(target.events) if target else [],
            "stats": self._stats.snapshot(instance_id).to_dict(),
        }

    def queue_size(self, instance_id: str) -> int:
        queue = self._queues.get(instance_id)
        return queue.qsize() if queue is not None else 0

    async def join(self, instance_id: str) -> None:
        """Aguarda até a fila da instância esvaziar (inclui retries)."""
        queue = self._queues.get(instance_id)
        if queue is not None:
            await queue.join()

    async def close(self) -> None:
        """Cancela todos os workers e fecha o cliente HTTP."""
        workers = list(self._workers.values())
        self._workers.clear()
        self._queues.clear()
        for worker in workers:
            worker.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
        await self._sender.close()
        logger.info("webhook_dispatcher_closed", extra={"cancelled_workers": len(workers)})
