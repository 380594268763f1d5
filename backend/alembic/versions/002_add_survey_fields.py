"""Add survey fields to registrations

Revision ID: 002
Revises: 001
Create Date: 2025-04-10 00:00:00.000000+00:00

What:  Adds the 16 nullable survey answer columns.
Why:   The sign-up form grew a short survey (background, current solutions,
       expectations). Existing rows keep NULL for every answer.
How:   Plain ADD COLUMN; multi-select answers are JSONB arrays, the rating
       is an integer, everything else is TEXT.

Rollback: downgrade() drops the survey columns (answers are lost, contacts stay).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


SURVEY_COLUMNS = (
    # Section 1: Background
    ("owns_pet", sa.Text()),
    ("pet_type", postgresql.JSONB()),
    ("pet_type_other", sa.Text()),
    ("outdoor_frequency", sa.Text()),
    ("has_lost_pet", sa.Text()),
    ("how_found_pet", sa.Text()),
    # Section 2: Current solutions & pain points
    ("uses_tracking_solution", sa.Text()),
    ("tracking_solution_details", sa.Text()),
    ("safety_worries", postgresql.JSONB()),
    ("safety_worries_other", sa.Text()),
    ("current_safety_methods", sa.Text()),
    # Section 3: Expectations
    ("important_features", postgresql.JSONB()),
    ("expected_challenges", postgresql.JSONB()),
    ("expected_challenges_other", sa.Text()),
    ("usefulness_rating", sa.Integer()),
    ("wish_feature", sa.Text()),
)


def upgrade() -> None:
    for name, column_type in SURVEY_COLUMNS:
        op.add_column("registrations", sa.Column(name, column_type, nullable=True))


def downgrade() -> None:
    for name, _ in reversed(SURVEY_COLUMNS):
        op.drop_column("registrations", name)
