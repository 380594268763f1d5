"""
PAWhere Backend — Registration Storage Interface
==================================================

What:  Abstract contract for persisting and reading registrations.
Why:   RegistrationService depends on this interface, not on SQLAlchemy, so
       the intake flow can be unit-tested with a stub and the backing store
       can change without touching the endpoint.
How:   RegistrationStore (registration_store.py) is the SQLAlchemy
       implementation used in production.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from pawhere.schemas.registration import RegistrationCreate, RegistrationRecord


class RegistrationStorage(ABC):
    """
    Contract:
        - ensure_schema() is idempotent and safe before every write
        - create_registration() raises DuplicateEmailError on a unique
          violation and never overwrites an existing record
        - lookups return domain records, never ORM rows
    """

    @abstractmethod
    async def ensure_schema(self) -> None:
        """
        Create the registrations table and any missing optional columns.

        Raises:
            SchemaProvisioningError: the datastore could not be prepared
        """

    @abstractmethod
    async def create_registration(self, payload: RegistrationCreate) -> RegistrationRecord:
        """
        Insert a new registration.

        Raises:
            DuplicateEmailError: the email is already registered
            DatabaseError: any other storage failure
        """

    @abstractmethod
    async def get_registration_by_email(self, email: str) -> Optional[RegistrationRecord]:
        """Exact-match lookup used for duplicate detection."""

    @abstractmethod
    async def get_registrations(self) -> List[RegistrationRecord]:
        """All registrations, oldest first. Unpaginated: this is a small lead list."""
