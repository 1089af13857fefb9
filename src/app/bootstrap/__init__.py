"""Bootstrap da aplicação — inicialização e wiring.

Composition root: configura logging, valida settings e monta os
serviços que a camada HTTP consome.

Uso:
    from app.bootstrap import initialize_app, validate_runtime_settings

    initialize_app()
    validate_runtime_settings()
"""

from __future__ import annotations

import logging

from app.bootstrap.dependencies import (
    ServiceContainer,
    create_provider_factory,
    create_services,
)
from app.observability import get_correlation_id
from config.logging import configure_logging, log_security_warning
from config.settings import (
    ApiSettings,
    BaseSettings,
    WebhookSettings,
    get_api_settings,
    get_base_settings,
    get_webhook_settings,
)

logger = logging.getLogger(__name__)


def initialize_app(base_settings: BaseSettings | None = None) -> None:
    """Configura logging JSON com correlation_id.

    Deve ser chamada uma vez no início do serviço.
    """
    settings = base_settings or get_base_settings()
    configure_logging(
        level=settings.log_level,
        service_name=settings.service_name.replace("-", "_"),
        correlation_id_getter=get_correlation_id,
    )


def validate_runtime_settings(
    base_settings: BaseSettings | None = None,
    api_settings: ApiSettings | None = None,
    webhook_settings: WebhookSettings | None = None,
) -> list[str]:
    """Valida settings e registra alertas de segurança no startup.

    Em `staging`/`production` erros de validação impedem o boot.
    Em `development` apenas geram alerta.

    Returns:
        Alertas de segurança emitidos (default key/secret, CORS aberto).

    Raises:
        RuntimeError: Configuração inválida em ambiente estrito.
    """
    base = base_settings or get_base_settings()
    api = api_settings or get_api_settings()
    webhook = webhook_settings or get_webhook_settings()

    errors: list[str] = []
    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"api: {error}" for error in api.validate())
    errors.extend(f"webhook: {error}" for error in webhook.validate())

    warnings = {
        **api.security_warnings(is_production=base.is_production),
        **webhook.security_warnings(),
    }
    for setting, message in warnings.items():
        log_security_warning(logger, message, setting)

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": base.environment},
        )
        return list(warnings.values())

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": base.environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if base.is_strict:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {base.environment}:\n{details}")
    return list(warnings.values())


__all__ = [
    "ServiceContainer",
    "create_provider_factory",
    "create_services",
    "initialize_app",
    "validate_runtime_settings",
]
