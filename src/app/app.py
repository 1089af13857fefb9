"""Entrypoint da aplicação Miaw API.

Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 3000

Uso (desenvolvimento):
    python -m app.app
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_exception_handlers
from api.middleware import CorrelationIdMiddleware
from api.routes import create_api_router
from app.bootstrap import create_services, initialize_app, validate_runtime_settings
from config.logging import get_logger
from config.settings import get_api_settings, get_base_settings, get_webhook_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from app.bootstrap import ServiceContainer

# Inicializar logging ANTES de qualquer log de startup
initialize_app()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida configurações e emite alertas de segurança

    Shutdown:
    - Derruba todas as instâncias (providers e filas de webhook)
    - Fecha o cliente HTTP de entrega
    """
    services: ServiceContainer = app.state.services
    logger.info(
        "app_starting",
        extra={"host": services.api_settings.host, "port": services.api_settings.port},
    )
    validate_runtime_settings(
        get_base_settings(), services.api_settings, services.webhook_settings
    )

    yield

    logger.info("app_shutting_down", extra={"instances": len(services.registry)})
    await services.shutdown()


def create_app(services: ServiceContainer | None = None) -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Args:
        services: Serviços já montados (testes injetam settings/transport próprios).
            Default: montados a partir das variáveis de ambiente.
    """
    services = services or create_services(get_api_settings(), get_webhook_settings())

    fastapi_app = FastAPI(
        title="Miaw API",
        description="Instâncias de mensageria com entrega de webhooks assinados",
        version="1.0.0",
        lifespan=lifespan,
    )
    # Serviços montados antes do lifespan: rotas funcionam mesmo sem startup
    fastapi_app.state.services = services

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=services.api_settings.cors_origins,
        allow_credentials=services.api_settings.cors_origin != "*",
        allow_methods=["*"],
        allow_headers=["*"],
    )
    fastapi_app.add_middleware(CorrelationIdMiddleware)

    register_exception_handlers(fastapi_app)
    fastapi_app.include_router(create_api_router())

    logger.info("app_configured", extra={"provider": services.api_settings.connection_provider})

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta."""
    import uvicorn

    settings = get_api_settings()
    logger.info("server_starting", extra={"host": settings.host, "port": settings.port})
    uvicorn.run(
        "app.app:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
