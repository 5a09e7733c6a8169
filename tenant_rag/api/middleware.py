"""API middleware -- CORS, request logging, and error handling.

# ─── MIDDLEWARE EXECUTION ORDER ───────────────────────────────────────
#
# Starlette middleware is a stack (last added, first executed):
#
#   In main.py:
#     app.add_middleware(ErrorHandlingMiddleware)   # added 1st -> inner
#     app.add_middleware(RequestLoggingMiddleware)  # added 2nd -> outer
#
#   Client -> RequestLogging -> ErrorHandling -> route handler
#
# RequestLoggingMiddleware therefore logs the status code the client
# actually receives, after ErrorHandling turned an exception into JSON.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from tenant_rag.api.schemas import ErrorResponse
from tenant_rag.utils.errors import (
    ConfigurationError,
    DimensionMismatch,
    IndexNotFoundError,
    IndexNotReadyError,
    InvalidResponseFormat,
    NamespaceNotFound,
    ProcessingError,
    RagPipelineError,
    TransportError,
    ValidationError,
)
from tenant_rag.utils.logging import clear_log_context, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# Most specific first; the first isinstance match wins.
_STATUS_BY_ERROR: tuple[tuple[type[RagPipelineError], int], ...] = (
    (ValidationError, 400),
    (NamespaceNotFound, 404),
    (IndexNotFoundError, 404),
    (ProcessingError, 422),
    (DimensionMismatch, 422),
    (TransportError, 502),
    (InvalidResponseFormat, 502),
    (IndexNotReadyError, 503),
    (ConfigurationError, 500),
)


def status_for(exc: RagPipelineError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware.  Defaults to ``["*"]``; restrict origins in production."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=response.status_code if response else 500,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            clear_log_context()


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert ``RagPipelineError`` subclasses into structured JSON errors.

    The status code follows the error class (400 for bad input, 502 when a
    model or store service failed, 503 when the index never became ready).
    Tracebacks stay in the server log; the client sees the error class,
    message, tenant and stage only.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except RagPipelineError as exc:
            status = status_for(exc)
            log = _logger.warning if status < 500 else _logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                tenant_id=exc.tenant_id,
                stage=exc.stage,
                status=status,
                path=str(request.url.path),
            )
            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
                tenant_id=exc.tenant_id,
                stage=exc.stage,
            )
            return JSONResponse(status_code=status, content=body.model_dump())
