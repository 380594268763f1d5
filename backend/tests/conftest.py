"""
PAWhere Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (SQLite database, mocked
       storage, API client, sample submissions).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── database: Database on a temp SQLite file (aiosqlite)
    ├── store: RegistrationStore on that database
    ├── mock_storage: AsyncMock RegistrationStorage (no database at all)
    ├── app: FastAPI instance with database/store attached to app.state
    ├── test_client: HTTPX AsyncClient talking to `app` in-process
    ├── contact_only: smallest valid submission
    └── full_submission: every survey answer filled in
"""

import os

# Override settings for testing BEFORE any pawhere imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./pawhere_test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["API_BASE_URL"] = "http://test"

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pawhere.database import Database
from pawhere.main import create_app
from pawhere.schemas.registration import RegistrationRecord
from pawhere.services.registration_store import RegistrationStore
from pawhere.services.storage_base import RegistrationStorage


# ══════════════════════════════════════════════════════════════════════════
# Storage Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database(tmp_path):
    """
    A Database on its own SQLite file.

    What:    Real SQLAlchemy async engine over aiosqlite.
    Why:     Exercises the actual DDL, unique constraint and JSON columns.
    How:     One file per test under pytest's tmp_path; disposed afterwards.
    """
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'registrations.db'}")
    yield db
    await db.dispose()


@pytest.fixture
def store(database):
    return RegistrationStore(database)


@pytest.fixture
def mock_storage():
    """
    AsyncMock implementing the RegistrationStorage contract.

    Usage:
        mock_storage.get_registration_by_email.return_value = None
        mock_storage.create_registration.return_value = make_record(email=...)
    """
    storage = AsyncMock(spec=RegistrationStorage)
    storage.get_registration_by_email.return_value = None
    storage.get_registrations.return_value = []
    return storage


@pytest.fixture
def make_record():
    """Factory for stored registrations as RegistrationStore would return them."""
    def _make(email="owner@pawhere.io", is_vip=False, **fields):
        return RegistrationRecord(
            id=uuid4(),
            email=email,
            is_vip=is_vip,
            created_at=datetime.now(timezone.utc),
            **fields,
        )
    return _make


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(database, store):
    """
    A fresh FastAPI app wired to the test database.

    ASGITransport does not run the lifespan, so the state it would have
    created is attached here.
    """
    application = create_app()
    application.state.database = database
    application.state.registration_store = store
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Async HTTP test client for endpoint testing.

    raise_app_exceptions=False lets tests see the 500 body the catch-all
    handler renders instead of the re-raised exception.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/api/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Sample Submissions
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def contact_only():
    return {"email": "a@b.com", "phone": "+1 555 0100"}


@pytest.fixture
def full_submission():
    """Every question answered, camelCase keys as the survey client sends them."""
    return {
        "email": "owner@pawhere.io",
        "phone": "+1 555 0199",
        "isVip": True,
        "ownsPet": "yes",
        "petType": ["Dog", "other"],
        "petTypeOther": "Ferret",
        "outdoorFrequency": "often",
        "hasLostPet": "yes",
        "howFoundPet": "A neighbour posted on the community board",
        "usesTrackingSolution": "no",
        "safetyWorries": ["Stolen", "Getting lost"],
        "currentSafetyMethods": "Name tag on the collar",
        "importantFeatures": ["Long battery life", "GPS tracking accuracy"],
        "expectedChallenges": ["Battery charging too often"],
        "usefulnessRating": 9,
        "wishFeature": "Share location with the dog sitter",
    }
