"""
PAWhere Backend — Registration Route Handlers
===============================================

What:  POST /api/register (intake), GET /api/registrations (admin export),
       GET /api (service index).
Why:   Entry point for the landing page's survey form.
How:   Reads the raw body, decodes it, and delegates to RegistrationService.
       Error responses are produced by the global handlers in main.py.
Who:   Called by the survey client and, for the listing, by operators.

Request Flow (POST /api/register):
    1. Read raw bytes; decode JSON (re-parsing a JSON-encoded string body)
    2. RegistrationService: ensure schema → validate → dedup → insert
    3. 201 with {message, registration: {id, email, isVip}}

Security:
    GET /api/registrations has no authentication. It exists for exporting
    the lead list and must not be exposed publicly without a gateway in
    front of it.
"""

import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Request

from pawhere.schemas.registration import (
    DuplicateEmailResponse,
    InternalErrorResponse,
    RegistrationCreatedResponse,
    RegistrationRecord,
    ValidationErrorResponse,
)
from pawhere.services.registration_service import RegistrationService
from pawhere.services.validation import decode_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Registration"])


def get_registration_service(request: Request) -> RegistrationService:
    """Build the service around the store created by the lifespan handler."""
    return RegistrationService(request.app.state.registration_store)


@router.post(
    "/register",
    status_code=201,
    response_model=RegistrationCreatedResponse,
    responses={
        201: {"description": "Registration stored", "model": RegistrationCreatedResponse},
        400: {"description": "Invalid registration data", "model": ValidationErrorResponse},
        409: {"description": "Email already registered", "model": DuplicateEmailResponse},
        500: {"description": "Server error", "model": InternalErrorResponse},
    },
    summary="Register for early access or VIP testing",
    description=(
        "Accepts the contact details and optional survey answers collected by the "
        "multi-step form. Each email can register once."
    ),
)
async def register(
    request: Request,
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationCreatedResponse:
    raw = await request.body()
    logger.info("Received registration request: %d bytes", len(raw))
    body = decode_body(raw)
    return await service.register(body)


@router.get(
    "/registrations",
    response_model=List[RegistrationRecord],
    responses={500: {"description": "Server error", "model": InternalErrorResponse}},
    summary="List all registrations",
)
async def list_registrations(
    service: RegistrationService = Depends(get_registration_service),
) -> List[RegistrationRecord]:
    return await service.list_registrations()


@router.get("", summary="Service index")
async def index() -> dict:
    return {
        "message": "PAWhere API is running",
        "endpoints": {
            "GET /api/health": "Health check",
            "GET /api/health/db": "Database health check",
            "POST /api/register": "User registration",
            "GET /api/registrations": "List registrations",
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
