"""API middleware -- request logging and error handling.

Starlette middleware is a stack (last added, first executed).  In main.py
``ErrorHandlingMiddleware`` is added before ``RequestLoggingMiddleware`` so
the logging middleware is outermost and records the final status code,
including errors converted below.
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.schemas import ErrorResponse
from src.utils.errors import FetchError, HosutoError, ProviderError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# Upstream failures are reported as a bad gateway; anything else is ours.
_UPSTREAM_ERRORS = (ProviderError, FetchError)

REQUEST_ID_HEADER = "X-Request-Id"


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the request's log events and log its outcome.

    The id is taken from an incoming ``X-Request-Id`` header when present,
    otherwise generated, and is echoed back on the response.  Server
    errors (5xx) are logged at WARNING, everything else at INFO.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        started = time.perf_counter()
        status_code = 500

        with structlog.contextvars.bound_contextvars(
            request_id=request_id, path=request.url.path
        ):
            try:
                response = await call_next(request)
                status_code = response.status_code
                response.headers[REQUEST_ID_HEADER] = request_id
                return response
            finally:
                log = _logger.warning if status_code >= 500 else _logger.info
                log(
                    "http_request",
                    method=request.method,
                    status=status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert escaped ``HosutoError`` subclasses into JSON error bodies.

    Provider and fetch failures become 502, every other application error
    500.  Details are logged server-side; the client sees the error type and
    message only.  Generic Python exceptions are left to the server's
    default 500 handler.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except HosutoError as exc:
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
            )
            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
            )
            status_code = 502 if isinstance(exc, _UPSTREAM_ERRORS) else 500
            return JSONResponse(
                status_code=status_code,
                content=body.model_dump(),
            )
