"""
PAWhere Backend — Request Logging Middleware
==============================================

What:  One access log line per HTTP request.
Why:   Shows which submissions were accepted, rejected or failed, and how
       long they took, without logging the body.
How:   Measures the call, then logs method, path, status, duration, request
       ID, client IP and device type at a level chosen by status code.

Privacy:
    Request bodies carry email addresses and phone numbers, so they are
    never logged here.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from pawhere.middleware.request_id import request_id_var

logger = logging.getLogger("pawhere.access")

# Probed every few seconds by the platform; not worth a log line each
QUIET_PATHS = {"/api/health", "/api/health/db"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log levels:
        5xx → ERROR, 4xx → WARNING, everything else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        device = request.headers.get("X-Device-Type", "unknown")
        method = request.method
        path = request.url.path

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s (%s)",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            device,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "device_type": device,
            },
        )
        return response
