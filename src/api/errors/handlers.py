"""Exception handlers da API.

Todo erro vira `{"success": false, "error": {...}}` com um
correlation_id por ocorrência, registrado também no log. Erros não
classificados retornam mensagem fixa; o detalhe fica só no log.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.errors import (
    INTERNAL_ERROR_CODE,
    INTERNAL_ERROR_MESSAGE,
    ApiError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_HTTP_STATUS_CODES = {
    401: "UNAUTHORIZED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def error_response(status_code: int, error: dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error},
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    logger.warning(
        "api_error",
        extra={
            "code": exc.code,
            "status_code": exc.status_code,
            "error_message": exc.message,
            "error_details": exc.details,
            "error_correlation_id": exc.correlation_id,
            "method": request.method,
            "path": request.url.path,
        },
    )
    return error_response(exc.status_code, exc.to_dict())


def _format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    details = []
    for error in exc.errors():
        # loc = ("body", "instanceId") → "instanceId"
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        details.append(
            {
                "field": ".".join(location),
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type"),
            }
        )
    return details


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = ValidationError("Request validation failed", details=_format_validation_errors(exc))
    return await api_error_handler(request, error)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    correlation_id = str(uuid.uuid4())
    code = _HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    logger.info(
        "http_error",
        extra={
            "code": code,
            "status_code": exc.status_code,
            "error_correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
        },
    )
    return error_response(
        exc.status_code,
        {"code": code, "message": str(exc.detail), "correlationId": correlation_id},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    correlation_id = str(uuid.uuid4())
    logger.exception(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
        },
    )
    return error_response(
        500,
        {
            "code": INTERNAL_ERROR_CODE,
            "message": INTERNAL_ERROR_MESSAGE,
            "correlationId": correlation_id,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registra todos os handlers na aplicação."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
