"""Create registrations table

Revision ID: 001
Revises: None
Create Date: 2025-03-02 00:00:00.000000+00:00

What:  Creates the contact-only `registrations` table of the first release.
Why:   Every landing page sign-up becomes one row; email is unique.
How:   UUID primary key, TIMESTAMP WITH TIME ZONE, named unique constraint.

Survey columns arrive in 002. Deployments that predate Alembic got this
shape from the runtime ensure_schema() step and can be stamped at 001.

Rollback: downgrade() drops the table entirely (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "registrations",

        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
            comment="Registration identifier",
        ),

        # Case-sensitive exact match; the app does not lowercase the local part
        sa.Column(
            "email",
            sa.Text(),
            nullable=False,
            comment="Contact email, one registration per address",
        ),

        sa.Column(
            "phone",
            sa.Text(),
            nullable=True,
            comment="Contact phone number as typed",
        ),

        sa.Column(
            "is_vip",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
            comment="Signed up through the VIP tester button",
        ),

        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When the registration was received (UTC)",
        ),

        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_registrations_email"),
    )

    # The admin export lists registrations oldest first
    op.create_index(
        "idx_registrations_created_at",
        "registrations",
        ["created_at"],
    )


def downgrade() -> None:
    """
    Drop the registrations table.

    WARNING: destructive. The lead list is the whole point of this service;
    take an export (GET /api/registrations) before running this anywhere real.
    """
    op.drop_index("idx_registrations_created_at", table_name="registrations")
    op.drop_table("registrations")
