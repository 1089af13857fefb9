"""Registro de métricas via structured logging.

As métricas saem como logs JSON e são agregadas fora do processo.

Métricas suportadas:
- Latência: tempo de requisição HTTP por rota
- Entrega de webhook: resultado de cada tentativa
- Transição de estado: mudanças de conexão por instância
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "http")
        operation: Nome da operação (ex: "POST /instances")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "correlation_id": correlation_id,
        },
    )


def record_webhook_delivery(
    instance_id: str,
    event_type: str,
    attempt: int,
    outcome: str,
    latency_ms: float,
    status_code: int | None = None,
) -> None:
    """Registra o resultado de uma tentativa de entrega.

    Args:
        instance_id: Instância dona do evento
        event_type: Tag do evento (ex: "message")
        attempt: Número da tentativa (1-based)
        outcome: "delivered", "retry" ou "failed_permanent"
        latency_ms: Duração da tentativa
        status_code: Status HTTP do receptor, se houve resposta
    """
    logger.info(
        "metric_webhook_delivery",
        extra={
            "metric_type": "webhook_delivery",
            "instance_id": instance_id,
            "event_type": event_type,
            "attempt": attempt,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "status_code": status_code,
        },
    )


def record_state_transition(
    instance_id: str,
    from_state: str,
    to_state: str,
    trigger: str,
) -> None:
    logger.info(
        "metric_state_transition",
        extra={
            "metric_type": "state_transition",
            "instance_id": instance_id,
            "from_state": from_state,
            "to_state": to_state,
            "trigger": trigger,
        },
    )
