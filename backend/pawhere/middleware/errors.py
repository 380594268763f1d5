"""
PAWhere Backend — Unhandled Error Middleware
==============================================

What:  Turns any exception no handler claimed into the generic 500 body.
Why:   Starlette renders the catch-all handler from its outermost layer,
       outside CORS and request ID. A browser on the landing page origin
       would then see a CORS failure ("network error") instead of a 500.
How:   Sits innermost in the middleware chain, so the response it builds
       still passes through CORS, request ID and access logging.
"""

import logging
from typing import Any, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from pawhere.config import settings
from pawhere.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


def internal_error_body(rid: str, exc: Exception) -> Dict[str, Any]:
    content: Dict[str, Any] = {"message": "Internal server error", "request_id": rid}
    # Diagnostic builds only; production never sees internal error text
    if not settings.is_production:
        content["error"] = str(exc)
    return content


class UnhandledErrorMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            rid = request_id_var.get("")
            logger.error("[%s] Unexpected error: %s", rid, str(e), exc_info=True)
            return JSONResponse(status_code=500, content=internal_error_body(rid, e))
