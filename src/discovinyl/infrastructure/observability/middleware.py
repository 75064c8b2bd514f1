"""Middleware for observability: request/response logging."""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from discovinyl.infrastructure.observability.logging import (
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


# Hey future me, this logs EVERY HTTP request/response. Request bodies are never logged: POST
# /vinyl carries base64 cover art (hundreds of KB) and the auth callback carries codes.
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses."""

    def __init__(self, app: ASGIApp, quiet_paths: tuple[str, ...] = ("/api/health",)) -> None:
        """Initialize middleware.

        Args:
            app: ASGI application
            quiet_paths: Paths logged at DEBUG instead of INFO (load balancer probes)
        """
        super().__init__(app)
        self.quiet_paths = quiet_paths

    # Yo, flow: take X-Correlation-ID from the request (or generate one), log the request, call the
    # handler, log status + duration, echo the id back in the response header so the front end
    # can show it in error toasts. Exceptions are logged with context and re-raised for the
    # catch-all handler.
    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request and log details."""
        set_correlation_id(request.headers.get(CORRELATION_HEADER))

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"
        level = logging.DEBUG if path in self.quiet_paths else logging.INFO

        logger.log(
            level,
            "→ %s %s",
            method,
            path,
            extra={
                "method": method,
                "path": path,
                "query_params": str(request.query_params),
                "client_ip": client_ip,
            },
        )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.exception(
                "Request failed: %s %s",
                method,
                path,
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": duration_ms,
                    "error_type": type(e).__name__,
                },
            )
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        status_mark = "✓" if response.status_code < 400 else "✗"
        logger.log(
            level,
            "%s %s %s → %s (%dms)",
            status_mark,
            method,
            path,
            response.status_code,
            duration_ms,
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers[CORRELATION_HEADER] = get_correlation_id()
        return response
