"""
PAWhere Backend — Registration Store (SQLAlchemy)
===================================================

What:  The storage adapter: ensure schema, create, find by email, list all.
Why:   Keeps SQL and ORM details out of the intake flow; callers only see
       RegistrationCreate in and RegistrationRecord out.
How:   Each operation opens its own transactional session from the injected
       Database. Driver errors are translated into application exceptions.
Who:   Built once in the application lifespan, used by RegistrationService.

Schema provisioning:
    ensure_schema() is the runtime counterpart of the Alembic revisions. It
    creates the table when missing and adds any survey column an older
    contact-only table lacks. Every statement is conditional, so calling it
    on each start and before each write changes nothing once the schema
    matches.

Uniqueness:
    The unique constraint on email is what actually prevents duplicates.
    When two submissions race past the pre-insert lookup, the loser's
    IntegrityError is translated into DuplicateEmailError, not a 500.
"""

import logging
from typing import List, Optional

from sqlalchemy import inspect, select, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pawhere.database import Database
from pawhere.exceptions import DatabaseError, DuplicateEmailError, SchemaProvisioningError
from pawhere.models.registration import SURVEY_COLUMNS, Registration
from pawhere.schemas.registration import RegistrationCreate, RegistrationRecord
from pawhere.services.storage_base import RegistrationStorage

logger = logging.getLogger(__name__)

UNIQUE_EMAIL_INDEX = "uq_registrations_email"


def _is_email_conflict(exc: IntegrityError) -> bool:
    """
    True when the IntegrityError is the email unique constraint.

    PostgreSQL names the constraint (uq_registrations_email); SQLite reports
    the column (registrations.email). Both mention "email".
    """
    detail = str(getattr(exc, "orig", exc)).lower()
    return "email" in detail and ("unique" in detail or "duplicate" in detail)


def _add_missing_columns(conn: Connection) -> List[str]:
    """Create the table if needed, then add survey columns it lacks."""
    table = Registration.__table__
    table.create(conn, checkfirst=True)

    existing = {column["name"] for column in inspect(conn).get_columns(table.name)}
    added = []
    for name in SURVEY_COLUMNS:
        if name in existing:
            continue
        ddl_type = table.c[name].type.compile(dialect=conn.dialect)
        conn.execute(text(f"ALTER TABLE {table.name} ADD COLUMN {name} {ddl_type}"))
        added.append(name)
    return added


def _has_unique_email(conn: Connection) -> bool:
    inspector = inspect(conn)
    table = Registration.__tablename__
    for constraint in inspector.get_unique_constraints(table):
        if constraint.get("column_names") == ["email"]:
            return True
    for index in inspector.get_indexes(table):
        if index.get("unique") and index.get("column_names") == ["email"]:
            return True
    return False


class RegistrationStore(RegistrationStorage):
    """SQLAlchemy-backed RegistrationStorage."""

    def __init__(self, database: Database):
        self.database = database

    async def ensure_schema(self) -> None:
        try:
            async with self.database.engine.begin() as conn:
                added = await conn.run_sync(_add_missing_columns)
                has_unique = await conn.run_sync(_has_unique_email)
        except Exception as e:
            logger.error("Schema provisioning failed: %s", str(e))
            raise SchemaProvisioningError(context={"error_type": type(e).__name__}) from e

        if added:
            logger.info("Added survey columns to registrations: %s", ", ".join(added))

        if not has_unique:
            await self._add_unique_email_index()

    async def _add_unique_email_index(self) -> None:
        """
        Tables created by early deployments have no unique constraint on
        email. Add a unique index in its own transaction; if existing rows
        already collide, keep serving and rely on the pre-insert lookup.
        """
        try:
            async with self.database.engine.begin() as conn:
                await conn.execute(
                    text(
                        f"CREATE UNIQUE INDEX IF NOT EXISTS {UNIQUE_EMAIL_INDEX} "
                        f"ON {Registration.__tablename__} (email)"
                    )
                )
            logger.info("Created unique index %s", UNIQUE_EMAIL_INDEX)
        except IntegrityError as e:
            logger.warning(
                "Could not add unique index on registrations.email, "
                "existing rows share an email: %s",
                str(e.orig),
            )

    async def create_registration(self, payload: RegistrationCreate) -> RegistrationRecord:
        row = Registration(**payload.model_dump())
        try:
            async with self.database.session() as session:
                session.add(row)
                await session.flush()
        except IntegrityError as e:
            if _is_email_conflict(e):
                logger.info("Unique constraint rejected duplicate registration")
                raise DuplicateEmailError(
                    email=payload.email,
                    context={"detected_by": "unique_constraint"},
                ) from e
            logger.error("Integrity error creating registration: %s", str(e.orig))
            raise DatabaseError(context={"error_type": "IntegrityError"}) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating registration: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save your registration. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Registration %s created (vip=%s)", row.id, row.is_vip)
        return RegistrationRecord.model_validate(row)

    async def get_registration_by_email(self, email: str) -> Optional[RegistrationRecord]:
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    select(Registration).where(Registration.email == email)
                )
                row = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error("Database error looking up registration: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        return RegistrationRecord.model_validate(row) if row is not None else None

    async def get_registrations(self) -> List[RegistrationRecord]:
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    select(Registration).order_by(Registration.created_at.asc())
                )
                rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing registrations: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve registrations. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        return [RegistrationRecord.model_validate(row) for row in rows]
