"""API middleware: request logging and error handling.

Starlette middleware is a stack (last added runs first).  ``create_app`` adds
ErrorHandlingMiddleware first and RequestLoggingMiddleware second, so the
request log always records the final status code, even when an error was
converted into a JSON body.
"""

from __future__ import annotations

import time

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from tenant_rag.api.schemas import ErrorResponse
from tenant_rag.utils.errors import (
    CollectionNotFoundError,
    ConfigurationError,
    FileTooLargeError,
    InputError,
    TenantRAGError,
)
from tenant_rag.utils.logging import bind_request_context, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def status_code_for(exc: TenantRAGError) -> int:
    """Map an application error onto an HTTP status code.

    Input errors are the caller's to fix (4xx); retryable infrastructure
    failures are upstream problems (502); anything else is a 500.
    """
    if isinstance(exc, FileTooLargeError):
        return 413
    if isinstance(exc, InputError):
        return 400
    if isinstance(exc, CollectionNotFoundError):
        return 404
    if isinstance(exc, ConfigurationError):
        return 500
    if exc.retryable:
        return 502
    return 500


def error_response(exc: TenantRAGError) -> JSONResponse:
    body = ErrorResponse(
        error=type(exc).__name__,
        detail=exc.message,
        stage=exc.stage,
        retryable=exc.retryable,
    )
    return JSONResponse(status_code=status_code_for(exc), content=body.model_dump())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status and duration.

    The ``X-Tenant-ID`` header is bound into the log context for the whole
    request, so service-level events carry it too.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None
        bind_request_context(tenant_id=request.headers.get("x-tenant-id"))

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn ``TenantRAGError`` subclasses into structured JSON errors.

    Full details go to the server log; the client gets the error class,
    message, stage and retryable flag only.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except TenantRAGError as exc:
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                stage=exc.stage,
                provider=exc.provider_name,
                path=str(request.url.path),
            )
            return error_response(exc)
