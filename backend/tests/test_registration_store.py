"""
PAWhere Backend — Registration Store Tests
============================================

What:  Tests for RegistrationStore against a real SQLite database.
Why:   Schema provisioning and the unique constraint are the parts of the
       pipeline mocks cannot vouch for.
How:   Each test gets its own SQLite file (see conftest.database).

What we test:
    ✅ ensure_schema() creates the table and is idempotent
    ✅ A legacy contact-only table is upgraded in place, data intact
    ✅ Create / find by email / list, with array order preserved
    ✅ Racing duplicate insert becomes DuplicateEmailError
    ✅ Unreachable database becomes SchemaProvisioningError
"""

import uuid

import pytest
from sqlalchemy import inspect, text

from pawhere.database import Database
from pawhere.exceptions import DuplicateEmailError, SchemaProvisioningError
from pawhere.models.registration import SURVEY_COLUMNS
from pawhere.services.registration_store import RegistrationStore
from pawhere.services.validation import validate_registration

LEGACY_TABLE_DDL = """
CREATE TABLE registrations (
    id CHAR(32) NOT NULL PRIMARY KEY,
    email TEXT NOT NULL,
    phone TEXT,
    is_vip BOOLEAN NOT NULL DEFAULT 0,
    created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


async def _columns(database: Database) -> set:
    async with database.engine.connect() as conn:
        return await conn.run_sync(
            lambda sync_conn: {c["name"] for c in inspect(sync_conn).get_columns("registrations")}
        )


class TestEnsureSchema:

    @pytest.mark.asyncio
    async def test_creates_table(self, store, database):
        await store.ensure_schema()

        columns = await _columns(database)
        assert {"id", "email", "phone", "is_vip", "created_at"} <= columns
        assert set(SURVEY_COLUMNS) <= columns

    @pytest.mark.asyncio
    async def test_is_idempotent(self, store, database, contact_only):
        await store.ensure_schema()
        await store.create_registration(validate_registration(contact_only))

        for _ in range(3):
            await store.ensure_schema()

        assert len(await store.get_registrations()) == 1
        assert set(SURVEY_COLUMNS) <= await _columns(database)

    @pytest.mark.asyncio
    async def test_upgrades_legacy_table(self, store, database):
        """A contact-only table from the first release gains the survey columns."""
        legacy_id = uuid.uuid4()
        async with database.engine.begin() as conn:
            await conn.execute(text(LEGACY_TABLE_DDL))
            await conn.execute(
                text(
                    "INSERT INTO registrations (id, email, phone, is_vip, created_at) "
                    "VALUES (:id, :email, :phone, 1, '2024-05-01 09:30:00')"
                ),
                {"id": legacy_id.hex, "email": "early@pawhere.io", "phone": "555"},
            )

        await store.ensure_schema()

        assert set(SURVEY_COLUMNS) <= await _columns(database)
        records = await store.get_registrations()
        assert len(records) == 1
        assert records[0].id == legacy_id
        assert records[0].email == "early@pawhere.io"
        assert records[0].is_vip is True
        assert records[0].owns_pet is None
        assert records[0].important_features is None

    @pytest.mark.asyncio
    async def test_legacy_table_gets_unique_email(self, store, database):
        async with database.engine.begin() as conn:
            await conn.execute(text(LEGACY_TABLE_DDL))

        await store.ensure_schema()
        await store.create_registration(validate_registration({"email": "a@b.com"}))

        with pytest.raises(DuplicateEmailError):
            await store.create_registration(validate_registration({"email": "a@b.com"}))

    @pytest.mark.asyncio
    async def test_unreachable_database(self, tmp_path):
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}")
        store = RegistrationStore(database)
        try:
            with pytest.raises(SchemaProvisioningError):
                await store.ensure_schema()
        finally:
            await database.dispose()


class TestCreateAndRead:

    @pytest.mark.asyncio
    async def test_create_returns_record(self, store, full_submission):
        await store.ensure_schema()

        record = await store.create_registration(validate_registration(full_submission))

        assert isinstance(record.id, uuid.UUID)
        assert record.email == "owner@pawhere.io"
        assert record.is_vip is True
        assert record.created_at is not None

    @pytest.mark.asyncio
    async def test_round_trip_preserves_answers(self, store, full_submission):
        await store.ensure_schema()
        await store.create_registration(validate_registration(full_submission))

        found = await store.get_registration_by_email("owner@pawhere.io")

        assert found is not None
        assert found.pet_type == ["Dog", "other"]
        assert found.safety_worries == ["Stolen", "Getting lost"]
        assert found.important_features == ["Long battery life", "GPS tracking accuracy"]
        assert found.usefulness_rating == 9
        assert found.tracking_solution_details is None

    @pytest.mark.asyncio
    async def test_find_missing_email(self, store):
        await store.ensure_schema()
        assert await store.get_registration_by_email("nobody@pawhere.io") is None

    @pytest.mark.asyncio
    async def test_email_match_is_exact(self, store):
        """Uniqueness is case-sensitive on the local part."""
        await store.ensure_schema()
        await store.create_registration(validate_registration({"email": "owner@pawhere.io"}))

        assert await store.get_registration_by_email("Owner@pawhere.io") is None
        await store.create_registration(validate_registration({"email": "Owner@pawhere.io"}))
        assert len(await store.get_registrations()) == 2

    @pytest.mark.asyncio
    async def test_list_in_insertion_order(self, store):
        await store.ensure_schema()
        for email in ("first@pawhere.io", "second@pawhere.io", "third@pawhere.io"):
            await store.create_registration(validate_registration({"email": email}))

        records = await store.get_registrations()

        assert [r.email for r in records] == [
            "first@pawhere.io",
            "second@pawhere.io",
            "third@pawhere.io",
        ]

    @pytest.mark.asyncio
    async def test_duplicate_insert_is_translated(self, store, contact_only):
        """Bypassing the pre-check, the constraint still yields a 409-class error."""
        await store.ensure_schema()
        await store.create_registration(validate_registration(contact_only))

        with pytest.raises(DuplicateEmailError) as exc_info:
            await store.create_registration(validate_registration(contact_only))

        assert exc_info.value.context["detected_by"] == "unique_constraint"
        assert len(await store.get_registrations()) == 1
