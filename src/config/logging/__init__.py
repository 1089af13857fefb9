"""Logging estruturado (JSON) do Miaw API.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização (bootstrap)
    configure_logging(level="INFO", service_name="miaw_api")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("webhook_delivered", extra={"instance_id": "bot-1"})

Campos presentes em todo log: correlation_id, service, level,
logger, message, asctime. Segredos e payloads nunca vão para o log.
"""

from config.logging.config import configure_logging, get_logger, log_security_warning
from config.logging.filters import CorrelationIdFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "CorrelationIdFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "log_security_warning",
]
