"""Taxonomia de erros expostos na fronteira HTTP.

Cada erro carrega status HTTP, código estável e um correlation_id
gerado por ocorrência, usado para cruzar a resposta com o log.
"""

from __future__ import annotations

import uuid
from typing import Any


class ApiError(Exception):
    """Base para erros de domínio com resposta HTTP tipada."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.correlation_id = str(uuid.uuid4())

    def to_dict(self) -> dict[str, Any]:
        """Corpo `error` da resposta (sem stack trace)."""
        body: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "correlationId": self.correlation_id,
        }
        if self.details is not None:
            body["details"] = self.details
        return body


class UnauthorizedError(ApiError):
    """Credencial ausente ou inválida."""

    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class BadRequestError(ApiError):
    """Entrada malformada ou operação impossível com a configuração atual."""

    status_code = 400
    code = "INVALID_REQUEST"


class ValidationError(ApiError):
    """Corpo da requisição não passou na validação de schema."""

    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(ApiError):
    """Recurso inexistente (ex: instance id desconhecido)."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Instance") -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource


class ConflictError(ApiError):
    """Identificador duplicado."""

    status_code = 409
    code = "CONFLICT"


class ServiceUnavailableError(ApiError):
    """Operação exige instância conectada ou provider indisponível."""

    status_code = 503
    code = "SERVICE_UNAVAILABLE"


INTERNAL_ERROR_CODE = "INTERNAL_ERROR"
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"
