"""Gestion standardisée des erreurs API avec enveloppes d'erreur.

Ce module traduit les erreurs métier (`backend.domain.errors`), les exceptions HTTP et les
erreurs inattendues en réponses JSON `{code, message, trace_id, details?}`. Le `trace_id` est
l'identifiant de requête posé par `RequestIDMiddleware`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.app.metrics import DOMAIN_ERRORS
from backend.core.http_constants import (
    HTTP_BAD_GATEWAY,
    HTTP_BAD_REQUEST,
    HTTP_CONFLICT,
    HTTP_FORBIDDEN,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_UNAUTHORIZED,
    HTTP_UNPROCESSABLE_ENTITY,
)
from backend.domain.errors import (
    AlreadyLinked,
    DomainError,
    DuplicateUser,
    Forbidden,
    NotFound,
    NotLinked,
    SpaceImageFetchError,
    StoreUnavailable,
    ValidationError,
)

log = logging.getLogger(__name__)


@dataclass
class ErrorEnvelope:
    """Standard error envelope for API responses."""

    code: str
    message: str
    trace_id: str | None = None
    details: dict[str, Any] | None = None


class ErrorCodes:
    """Standard error codes for the API."""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CONFLICT = "CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BAD_GATEWAY = "BAD_GATEWAY"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


_HTTP_ERROR_CODES = {
    400: ErrorCodes.BAD_REQUEST,
    401: ErrorCodes.UNAUTHORIZED,
    403: ErrorCodes.FORBIDDEN,
    404: ErrorCodes.NOT_FOUND,
    405: ErrorCodes.METHOD_NOT_ALLOWED,
    409: ErrorCodes.CONFLICT,
    422: ErrorCodes.VALIDATION_ERROR,
    500: ErrorCodes.INTERNAL_ERROR,
    502: ErrorCodes.BAD_GATEWAY,
    503: ErrorCodes.SERVICE_UNAVAILABLE,
}

# Ordre significatif : la première classe compatible l'emporte
DOMAIN_STATUS: list[tuple[type[DomainError], int]] = [
    (ValidationError, HTTP_BAD_REQUEST),
    (NotFound, HTTP_NOT_FOUND),
    (Forbidden, HTTP_FORBIDDEN),
    (AlreadyLinked, HTTP_BAD_REQUEST),
    (NotLinked, HTTP_BAD_REQUEST),
    (StoreUnavailable, HTTP_SERVICE_UNAVAILABLE),
    (DuplicateUser, HTTP_CONFLICT),
    (SpaceImageFetchError, HTTP_BAD_GATEWAY),
]


class APIError(StarletteHTTPException):
    """Custom API error with standard envelope."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        trace_id: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code = code
        self.message = message
        self.trace_id = trace_id
        self.details = details


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    trace_id: str | None = None,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    envelope = ErrorEnvelope(code=code, message=message, trace_id=trace_id, details=details)
    return JSONResponse(
        status_code=status_code,
        content={
            "code": envelope.code,
            "message": envelope.message,
            "trace_id": envelope.trace_id,
            **({"details": envelope.details} if envelope.details else {}),
        },
        headers=headers,
    )


def extract_trace_id(request: Request) -> str | None:
    """Identifiant de trace : en-tête `X-Trace-ID`, sinon identifiant de requête."""
    trace_id = request.headers.get("X-Trace-ID")
    if trace_id:
        return trace_id
    return getattr(request.state, "request_id", None)


def status_for(exc: DomainError) -> int:
    """Code HTTP associé à une erreur métier (500 si la classe n'est pas répertoriée)."""
    for cls, status in DOMAIN_STATUS:
        if isinstance(exc, cls):
            return status
    return HTTP_INTERNAL_SERVER_ERROR


def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    """Traduit une erreur métier en réponse enveloppée."""
    trace_id = extract_trace_id(request)
    status = status_for(exc)
    DOMAIN_ERRORS.labels(code=exc.code).inc()
    details = {"field": exc.field, "reason": exc.reason} if isinstance(exc, ValidationError) else None

    level = logging.ERROR if status >= HTTP_INTERNAL_SERVER_ERROR else logging.INFO
    log.log(
        level,
        "Domain error occurred",
        extra={
            "code": exc.code,
            "error_message": exc.message,
            "status_code": status,
            "trace_id": trace_id,
            "path": request.url.path,
        },
    )
    return create_error_response(status, exc.code, exc.message, trace_id, details)


def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions with standard envelope."""
    trace_id = extract_trace_id(request) or exc.trace_id
    log.warning(
        "API error occurred",
        extra={
            "code": exc.code,
            "error_message": exc.message,
            "status_code": exc.status_code,
            "trace_id": trace_id,
        },
    )
    return create_error_response(
        exc.status_code, exc.code, exc.message, trace_id, exc.details, exc.headers
    )


def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTPException (routing 404/405 included) with standard envelope."""
    if isinstance(exc, APIError):
        return handle_api_error(request, exc)
    trace_id = extract_trace_id(request)
    code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    log.info(
        "HTTP exception occurred",
        extra={
            "code": code,
            "error_message": str(exc.detail),
            "status_code": exc.status_code,
            "trace_id": trace_id,
        },
    )
    return create_error_response(
        exc.status_code, code, str(exc.detail), trace_id, headers=getattr(exc, "headers", None)
    )


def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Corps ou paramètres mal formés : 422 avec la liste des champs en cause."""
    errors = [
        {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in exc.errors()
    ]
    return create_error_response(
        HTTP_UNPROCESSABLE_ENTITY,
        ErrorCodes.VALIDATION_ERROR,
        "The request payload is invalid.",
        extract_trace_id(request),
        {"errors": errors},
    )


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions with standard envelope."""
    trace_id = extract_trace_id(request)
    log.error(
        "Unexpected error occurred",
        extra={
            "code": ErrorCodes.INTERNAL_ERROR,
            "trace_id": trace_id,
            "exception_type": type(exc).__name__,
        },
        exc_info=exc,
    )
    return create_error_response(
        HTTP_INTERNAL_SERVER_ERROR,
        ErrorCodes.INTERNAL_ERROR,
        "An unexpected error occurred",
        trace_id,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Branche l'ensemble des gestionnaires d'erreurs sur l'application."""
    app.add_exception_handler(DomainError, handle_domain_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_generic_exception)


def unauthorized(message: str, code: str = ErrorCodes.UNAUTHORIZED) -> APIError:
    """Create a 401 Unauthorized error (avec en-tête WWW-Authenticate)."""
    return APIError(HTTP_UNAUTHORIZED, code, message, headers={"WWW-Authenticate": "Bearer"})


def bad_request(message: str, details: dict[str, Any] | None = None) -> APIError:
    """Create a 400 Bad Request error."""
    return APIError(HTTP_BAD_REQUEST, ErrorCodes.BAD_REQUEST, message, details=details)


def forbidden(message: str) -> APIError:
    """Create a 403 Forbidden error."""
    return APIError(HTTP_FORBIDDEN, ErrorCodes.FORBIDDEN, message)


def not_found(message: str) -> APIError:
    """Create a 404 Not Found error."""
    return APIError(HTTP_NOT_FOUND, ErrorCodes.NOT_FOUND, message)
