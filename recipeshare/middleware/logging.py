"""
RecipeShare API: Request Logging Middleware
============================================

What:  One access-log line per HTTP request.
How:   Times the downstream call and logs method, path, status, duration and
       client IP under the "recipeshare.access" logger. Level follows the
       status: 5xx → ERROR, 4xx → WARNING, otherwise INFO.

Logged: method, path, query presence, status, duration, IP, request ID.
Not logged: form fields, uploaded file bytes, identity headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from recipeshare.middleware.request_id import request_id_var

logger = logging.getLogger("recipeshare.access")

# Probes hit these every few seconds
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request once its response is ready."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        logger.log(
            log_level,
            "%s %s%s %d %.1fms from %s",
            request.method,
            path,
            "?" if request.url.query else "",
            status,
            duration_ms,
            client_ip,
            extra={
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "rid": rid,
            },
        )
        return response
