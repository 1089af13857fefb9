"""Endpoint de health check."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    """Resposta do health check."""

    status: str
    timestamp: str
    service: str
    instances: int
    version: str = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Liveness probe — verifica se o serviço está rodando."""
    services = request.app.state.services
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(UTC).isoformat(),
        service="miaw-api",
        instances=len(services.registry),
    )
