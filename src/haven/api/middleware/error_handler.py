"""
Error Handler Middleware

Provides consistent error handling and response formatting.
Logs errors with correlation IDs for debugging.

Expected failures (HavenError subclasses) are translated by the
exception handlers registered on the app; anything else reaches the
middleware and becomes a sanitized 500.
"""

import time
import traceback
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from haven.config.logging_config import (
    bind_correlation_id,
    clear_context,
    get_correlation_id,
    get_logger,
)
from haven.domain.exceptions import (
    Conflict,
    Forbidden,
    HavenError,
    NotFound,
    Unauthenticated,
)
from haven.infrastructure.metrics import track_http_request
from haven.infrastructure.monitoring import capture_exception_with_context

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Most specific first: SessionExpired is an Unauthenticated
STATUS_CODES: tuple[tuple[type[HavenError], int], ...] = (
    (Unauthenticated, 401),
    (Forbidden, 403),
    (NotFound, 404),
    (Conflict, 409),
)


def status_code_for(exc: HavenError) -> int:
    """HTTP status for an expected failure."""
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 400


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Provides:
    - Correlation ID tracking for all requests
    - Consistent error response format
    - Error logging and Sentry capture
    - Request count and latency metrics
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request with error handling."""

        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid4())
        bind_correlation_id(correlation_id)
        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[CORRELATION_HEADER] = correlation_id
            return response

        except Exception as e:
            logger.error(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error_type=type(e).__name__,
                traceback=traceback.format_exc(),
            )
            capture_exception_with_context(e, correlation_id=correlation_id)

            # Return sanitized error response
            return JSONResponse(
                status_code=500,
                content={
                    "error": "internal_error",
                    "message": "An unexpected error occurred. Please try again.",
                    "correlation_id": correlation_id,
                },
                headers={CORRELATION_HEADER: correlation_id},
            )

        finally:
            route = request.scope.get("route")
            endpoint = getattr(route, "path", "unmatched")
            track_http_request(
                request.method,
                endpoint,
                status_code,
                time.perf_counter() - start_time,
            )
            clear_context()


async def haven_error_handler(request: Request, exc: HavenError) -> JSONResponse:
    """Translate an expected failure into the standard error body."""
    status_code = status_code_for(exc)
    correlation_id = get_correlation_id()

    headers = {}
    if correlation_id:
        headers[CORRELATION_HEADER] = correlation_id
    if status_code == 401:
        headers["WWW-Authenticate"] = "Bearer"

    logger.info(
        "request_rejected",
        path=request.url.path,
        status_code=status_code,
        error=exc.code,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.code,
            "message": exc.message,
            "correlation_id": correlation_id,
        },
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for the domain exception taxonomy."""
    app.add_exception_handler(HavenError, haven_error_handler)
