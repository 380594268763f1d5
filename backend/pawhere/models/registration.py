"""
PAWhere Backend — Registration SQLAlchemy Model
=================================================

What:  ORM model for the `registrations` table.
Why:   Maps lead-capture submissions to rows; the same metadata drives
       `ensure_schema()` and the Alembic revisions.
How:   Inherits from Base. Array answers are JSON (JSONB on PostgreSQL).
Who:   Used by RegistrationStore for inserts and lookups.

Table Design:
    - id: UUID generated in Python at insert time, immutable
    - email: NOT NULL with a named unique constraint. Uniqueness is exact
      (case-sensitive); the constraint is the last guard against a racing
      duplicate insert
    - survey answers: all nullable; NULL means "not answered"
    - created_at: UTC, assigned at insert

Columns are grouped the way the survey is: contact, background, current
solutions, expectations. The first group is the legacy shape of the table;
SURVEY_COLUMNS lists the columns added later so `ensure_schema()` can bring
an old table up to date.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, Text, UniqueConstraint, Uuid, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from pawhere.database import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONList = JSON().with_variant(JSONB(), "postgresql")


class Registration(Base):
    """
    A single lead-capture record: an email, an acquisition channel flag and
    the optional survey answers.

    Lifecycle:
        Created exactly once by POST /api/register. Never updated or deleted.
        Read by email (dedup) and listed in full (admin export).
    """

    __tablename__ = "registrations"

    # ── Contact ───────────────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # VIP tester channel vs. general early access
    is_vip: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    # ── Section 1: Background ─────────────────────────────────────────────
    owns_pet: Mapped[Optional[str]] = mapped_column(Text)
    pet_type: Mapped[Optional[List[str]]] = mapped_column(JSONList)
    pet_type_other: Mapped[Optional[str]] = mapped_column(Text)
    outdoor_frequency: Mapped[Optional[str]] = mapped_column(Text)
    has_lost_pet: Mapped[Optional[str]] = mapped_column(Text)
    how_found_pet: Mapped[Optional[str]] = mapped_column(Text)

    # ── Section 2: Current solutions & pain points ────────────────────────
    uses_tracking_solution: Mapped[Optional[str]] = mapped_column(Text)
    tracking_solution_details: Mapped[Optional[str]] = mapped_column(Text)
    safety_worries: Mapped[Optional[List[str]]] = mapped_column(JSONList)
    safety_worries_other: Mapped[Optional[str]] = mapped_column(Text)
    current_safety_methods: Mapped[Optional[str]] = mapped_column(Text)

    # ── Section 3: Expectations ───────────────────────────────────────────
    important_features: Mapped[Optional[List[str]]] = mapped_column(JSONList)
    expected_challenges: Mapped[Optional[List[str]]] = mapped_column(JSONList)
    expected_challenges_other: Mapped[Optional[str]] = mapped_column(Text)
    usefulness_rating: Mapped[Optional[int]] = mapped_column(Integer)
    wish_feature: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_registrations_email"),
        Index("idx_registrations_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Registration(id={self.id}, email='{self.email}', is_vip={self.is_vip})>"


# Columns added to the table after the first release. A table created by
# the original contact-only schema lacks these; ensure_schema() adds them.
SURVEY_COLUMNS = (
    "owns_pet",
    "pet_type",
    "pet_type_other",
    "outdoor_frequency",
    "has_lost_pet",
    "how_found_pet",
    "uses_tracking_solution",
    "tracking_solution_details",
    "safety_worries",
    "safety_worries_other",
    "current_safety_methods",
    "important_features",
    "expected_challenges",
    "expected_challenges_other",
    "usefulness_rating",
    "wish_feature",
)
