"""
Safe Haven Backend: Request ID Middleware
===========================================

What:  Tags each request with a short correlation id, echoes it in the
       X-Request-ID response header, and stamps it on every log record
       emitted while the request is handled.
How:   The id lives in a ContextVar; RequestIDLogFilter copies it onto log
       records so the format string can print %(request_id)s.

Error bodies carry the same id, so a client reporting a failed booking can
quote it and the office can find the matching log lines.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


class RequestIDLogFilter(logging.Filter):
    """Adds `request_id` to every record ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("") or "-"
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Uses the caller's X-Request-ID when it is present and sane, otherwise
    generates an 8-character id.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get("X-Request-ID", "").strip()
        if supplied and len(supplied) <= MAX_CLIENT_ID_LENGTH and supplied.isprintable():
            rid = supplied
        else:
            rid = uuid.uuid4().hex[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
