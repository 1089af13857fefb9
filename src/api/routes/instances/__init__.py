"""Router de instâncias (autenticado em todas as rotas)."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import require_api_key
from api.routes.instances.messaging import router as messaging_router
from api.routes.instances.router import router as lifecycle_router
from api.routes.instances.webhooks import router as webhooks_router

INSTANCES_PREFIX = "/instances"

router = APIRouter(dependencies=[Depends(require_api_key)])
router.include_router(lifecycle_router, prefix=INSTANCES_PREFIX)
router.include_router(webhooks_router, prefix=INSTANCES_PREFIX)
router.include_router(messaging_router, prefix=INSTANCES_PREFIX)

__all__ = ["router"]
