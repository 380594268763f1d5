"""
PAWhere Backend — Registration Service (Intake Orchestrator)
==============================================================

What:  Runs one registration submission through the intake stages.
Why:   Keeps the ordering of gates (schema, validation, dedup, insert) and
       the failure exits in one place, independent of HTTP.
How:   Receives an already-decoded body and a RegistrationStorage.
Who:   Called by POST /api/register.

Intake Flow:
    ┌──────────┐   ┌────────────────┐   ┌───────────┐   ┌───────────────┐   ┌───────────┐
    │ RECEIVED │──▶│ SCHEMA_ENSURED │──▶│ VALIDATED │──▶│ DEDUP_CHECKED │──▶│ PERSISTED │
    └──────────┘   └────────────────┘   └───────────┘   └───────────────┘   └───────────┘
                          │                   │                 │                  │
                          ▼                   ▼                 ▼                  ▼
              SchemaProvisioningError   ValidationError  DuplicateEmailError  DuplicateEmailError
                       (500)                (400)              (409)          (409, racing insert)

    Duplicate and validation failures have no side effects. The only durable
    effect is the successful insert.
"""

import enum
import logging
from typing import Any, Dict, List

from pawhere.exceptions import DuplicateEmailError
from pawhere.middleware.request_id import request_id_var
from pawhere.schemas.registration import (
    RegistrationCreatedResponse,
    RegistrationRecord,
    RegistrationSummary,
)
from pawhere.services.storage_base import RegistrationStorage
from pawhere.services.validation import validate_registration

logger = logging.getLogger(__name__)


class IntakeStage(str, enum.Enum):
    RECEIVED = "RECEIVED"
    SCHEMA_ENSURED = "SCHEMA_ENSURED"
    VALIDATED = "VALIDATED"
    DEDUP_CHECKED = "DEDUP_CHECKED"
    PERSISTED = "PERSISTED"
    RESPONDED = "RESPONDED"


class RegistrationService:
    """
    Intake orchestrator. Stateless apart from the injected storage.

    Error Handling Strategy:
        Application exceptions propagate unchanged to the global handlers.
        Anything else is left to the catch-all handler (generic 500).
    """

    def __init__(self, storage: RegistrationStorage):
        self.storage = storage

    def _advance(self, stage: IntakeStage) -> IntakeStage:
        logger.debug("[%s] intake stage → %s", request_id_var.get(""), stage.value)
        return stage

    async def register(self, body: Dict[str, Any]) -> RegistrationCreatedResponse:
        """
        Process one submission.

        Args:
            body: decoded JSON object from the request

        Returns:
            RegistrationCreatedResponse with the id/email/isVip projection

        Raises:
            SchemaProvisioningError: table could not be ensured (500)
            ValidationError: body fails the registration schema (400)
            DuplicateEmailError: email already registered (409)
            DatabaseError: insert failed for another reason (500)
        """
        self._advance(IntakeStage.RECEIVED)

        await self.storage.ensure_schema()
        self._advance(IntakeStage.SCHEMA_ENSURED)

        payload = validate_registration(body)
        self._advance(IntakeStage.VALIDATED)

        existing = await self.storage.get_registration_by_email(payload.email)
        if existing is not None:
            logger.info("Duplicate registration attempt for existing record %s", existing.id)
            raise DuplicateEmailError(email=payload.email, context={"detected_by": "pre_check"})
        self._advance(IntakeStage.DEDUP_CHECKED)

        record = await self.storage.create_registration(payload)
        self._advance(IntakeStage.PERSISTED)

        response = RegistrationCreatedResponse(
            message="Registration successful",
            registration=RegistrationSummary(
                id=record.id,
                email=record.email,
                is_vip=record.is_vip,
            ),
        )
        self._advance(IntakeStage.RESPONDED)
        return response

    async def list_registrations(self) -> List[RegistrationRecord]:
        return await self.storage.get_registrations()
