"""
Safe Haven Backend: Request Logging Middleware
================================================

What:  One access-log line per request: method, path, status, duration,
       request id, client IP.
Who:   Applied to every request; /health and CORS preflights are skipped.

Privacy:
    Request bodies are never logged. Booking and contact forms carry names,
    phone numbers and free-text messages about people's circumstances, and
    the Authorization header carries bearer tokens.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from safehaven.middleware.request_id import request_id_var

logger = logging.getLogger("safehaven.access")

QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log level follows the response class:
        5xx → ERROR, 4xx → WARNING, everything else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            client_ip,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "rid": request_id_var.get(""),
            },
        )
        return response
