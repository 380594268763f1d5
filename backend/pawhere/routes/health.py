"""
PAWhere Backend — Health Check Routes
=======================================

What:  Liveness probes for the deployment tooling.
Why:   A backend that cannot reach its database cannot take registrations,
       so the probe verifies the database, not just the process.
How:   Runs SELECT 1 through the application's Database.
Who:   Load balancers, uptime monitors and the deploy smoke test.

Responses:
    200 {ok: true, database: "connected", timestamp}
    500 {ok: false, error}
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from pawhere.config import settings
from pawhere.schemas.registration import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health"])


async def _probe(request: Request) -> JSONResponse:
    database = getattr(request.app.state, "database", None)
    if database is None:
        return JSONResponse(
            status_code=500,
            content=HealthResponse(ok=False, error="Database not configured").model_dump(
                mode="json", exclude_none=True
            ),
        )

    try:
        await database.ping()
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        error = "Database connection failed"
        if not settings.is_production:
            error = f"{error}: {e}"
        return JSONResponse(
            status_code=500,
            content=HealthResponse(ok=False, error=error).model_dump(mode="json", exclude_none=True),
        )

    return JSONResponse(
        status_code=200,
        content=HealthResponse(
            ok=True,
            database="connected",
            timestamp=datetime.now(timezone.utc),
        ).model_dump(mode="json", exclude_none=True),
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={500: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(request: Request) -> JSONResponse:
    return await _probe(request)


@router.get(
    "/health/db",
    response_model=HealthResponse,
    summary="Database health check",
    responses={500: {"description": "Database unreachable", "model": HealthResponse}},
)
async def database_health_check(request: Request) -> JSONResponse:
    return await _probe(request)
