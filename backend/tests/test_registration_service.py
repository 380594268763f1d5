"""
PAWhere Backend — Registration Service Unit Tests
===================================================

What:  Tests for the RegistrationService intake flow.
Why:   The order of the gates (schema, validation, dedup, insert) decides
       which failures have side effects.
How:   Uses a mock RegistrationStorage (no real DB).

What we test:
    ✅ Successful intake runs the stages in order and returns the projection
    ✅ Pre-check duplicate stops before insert
    ✅ Invalid data stops before any lookup
    ✅ Schema failure stops everything
    ✅ A racing duplicate from the insert propagates unchanged
"""

import pytest

from pawhere.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    SchemaProvisioningError,
    ValidationError,
)
from pawhere.schemas.registration import RegistrationCreate
from pawhere.services.registration_service import RegistrationService


class TestRegister:
    """Tests for the register() workflow."""

    @pytest.mark.asyncio
    async def test_register_success(self, mock_storage, make_record, full_submission):
        record = make_record(email="owner@pawhere.io", is_vip=True)
        mock_storage.create_registration.return_value = record
        service = RegistrationService(mock_storage)

        result = await service.register(full_submission)

        assert result.message == "Registration successful"
        assert result.registration.id == record.id
        assert result.registration.email == "owner@pawhere.io"
        assert result.registration.is_vip is True

        mock_storage.ensure_schema.assert_awaited_once()
        mock_storage.get_registration_by_email.assert_awaited_once_with("owner@pawhere.io")
        payload = mock_storage.create_registration.await_args.args[0]
        assert isinstance(payload, RegistrationCreate)
        assert payload.important_features == ["Long battery life", "GPS tracking accuracy"]

    @pytest.mark.asyncio
    async def test_stages_run_in_order(self, mock_storage, make_record, contact_only):
        calls = []
        mock_storage.ensure_schema.side_effect = lambda: calls.append("ensure_schema")

        async def lookup(email):
            calls.append("lookup")
            return None

        async def create(payload):
            calls.append("create")
            return make_record(email=payload.email)

        mock_storage.get_registration_by_email.side_effect = lookup
        mock_storage.create_registration.side_effect = create

        await RegistrationService(mock_storage).register(contact_only)

        assert calls == ["ensure_schema", "lookup", "create"]

    @pytest.mark.asyncio
    async def test_duplicate_detected_by_pre_check(self, mock_storage, make_record, contact_only):
        mock_storage.get_registration_by_email.return_value = make_record(email="a@b.com")

        with pytest.raises(DuplicateEmailError) as exc_info:
            await RegistrationService(mock_storage).register(contact_only)

        assert exc_info.value.context["detected_by"] == "pre_check"
        mock_storage.create_registration.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_data_has_no_side_effects(self, mock_storage):
        with pytest.raises(ValidationError) as exc_info:
            await RegistrationService(mock_storage).register({"phone": "123"})

        assert exc_info.value.fields == ["email"]
        mock_storage.ensure_schema.assert_awaited_once()
        mock_storage.get_registration_by_email.assert_not_awaited()
        mock_storage.create_registration.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_schema_failure_stops_intake(self, mock_storage, contact_only):
        mock_storage.ensure_schema.side_effect = SchemaProvisioningError()

        with pytest.raises(SchemaProvisioningError):
            await RegistrationService(mock_storage).register(contact_only)

        mock_storage.get_registration_by_email.assert_not_awaited()
        mock_storage.create_registration.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_racing_duplicate_propagates(self, mock_storage, contact_only):
        mock_storage.create_registration.side_effect = DuplicateEmailError(
            email="a@b.com", context={"detected_by": "unique_constraint"}
        )

        with pytest.raises(DuplicateEmailError) as exc_info:
            await RegistrationService(mock_storage).register(contact_only)

        assert exc_info.value.context["detected_by"] == "unique_constraint"

    @pytest.mark.asyncio
    async def test_database_error_propagates(self, mock_storage, contact_only):
        mock_storage.create_registration.side_effect = DatabaseError()

        with pytest.raises(DatabaseError):
            await RegistrationService(mock_storage).register(contact_only)


class TestListRegistrations:

    @pytest.mark.asyncio
    async def test_delegates_to_storage(self, mock_storage, make_record):
        records = [make_record(email="a@b.com"), make_record(email="c@d.com")]
        mock_storage.get_registrations.return_value = records

        assert await RegistrationService(mock_storage).list_registrations() == records
