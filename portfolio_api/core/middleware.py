# File: portfolio_api/core/middleware.py

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from portfolio_api.core.logging_config import generate_request_id, set_request_id

logger = logging.getLogger("portfolio_api.access")

SKIP_LOGGING_PATHS = {"/api/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One access-log line per request, with a request id that downstream log
    records pick up through the context variable.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        path = request.url.path
        start_time = time.perf_counter()

        try:
            try:
                response = await call_next(request)
            except Exception:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.exception("%s %s - exception (%.2fms)", request.method, path, duration_ms)
                raise
            self._log(request, response, path, request_id, start_time)
            return response
        finally:
            set_request_id("")

    def _log(self, request, response, path, request_id, start_time):
        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if path not in SKIP_LOGGING_PATHS:
            if response.status_code >= 500:
                log = logger.error
            elif response.status_code >= 400:
                log = logger.warning
            else:
                log = logger.info
            log(
                "%s %s - %d (%.2fms)",
                request.method,
                path,
                response.status_code,
                duration_ms,
                extra={"http_status": response.status_code, "duration_ms": duration_ms},
            )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Baseline security headers on every response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("Cross-Origin-Resource-Policy", "cross-origin")
        return response
