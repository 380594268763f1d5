"""
PAWhere Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the registration intake pipeline.
Why:   Each failure class maps to one HTTP status and one user-facing message;
       global handlers in main.py turn them into structured JSON responses.
How:   Every exception carries a message and an optional context dict that is
       logged server-side but never returned to the client.
Who:   Raised by the validation layer, RegistrationStore, RegistrationService
       and the intake client.

Exception Hierarchy:
    PawhereError (base)
    ├── ValidationError          → 400 Bad Request (field-level errors)
    ├── DuplicateEmailError      → 409 Conflict (DUPLICATE_EMAIL)
    ├── SchemaProvisioningError  → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    └── IntakeClientError        (raised client-side only)
        ├── TransientNetworkError  request never got an answer
        └── ApiResponseError       server answered with a non-2xx status
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class FieldError(BaseModel):
    """One field-level validation problem, as returned in 400 responses."""
    path: str
    message: str
    code: str


class PawhereError(Exception):
    """
    Base exception for all PAWhere application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PawhereError):
    """
    Raised when a submission fails the registration schema.

    What:    Bad email format, wrong enum value, out-of-range rating, a body
             that is not a JSON object.
    HTTP:    400 Bad Request, body `{message, errors: [{path, message, code}]}`
    Never persisted; the user is re-prompted with the field messages.
    """

    def __init__(
        self,
        errors: Optional[List[FieldError]] = None,
        message: str = "Invalid registration data",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.errors = list(errors or [])

    @property
    def fields(self) -> List[str]:
        return [error.path for error in self.errors]


class DuplicateEmailError(PawhereError):
    """
    Raised when a registration for the email already exists.

    Detected either by the pre-insert lookup or by translating the unique
    constraint violation of a racing insert.
    HTTP:    409 Conflict, body `{message, error: "DUPLICATE_EMAIL"}`
    """

    code = "DUPLICATE_EMAIL"

    def __init__(
        self,
        email: Optional[str] = None,
        message: str = "Email already registered",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.email = email


class SchemaProvisioningError(PawhereError):
    """
    Raised when the idempotent schema-ensure step fails.

    Usually means the datastore is unreachable. Fatal for the request and
    raised before any write, so nothing is partially stored.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Could not prepare the registrations table",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(PawhereError):
    """
    Raised when a query or insert fails for any reason other than a
    duplicate email. Details stay in the server log.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IntakeClientError(PawhereError):
    """Base for failures observed by the survey client while submitting."""


class TransientNetworkError(IntakeClientError):
    """
    The request failed before a response arrived: connection refused,
    DNS failure or the submission timeout elapsed. The UI answers with
    "check your connection" rather than a generic error.
    """

    def __init__(
        self,
        message: str = "Network error - check your connection",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ApiResponseError(IntakeClientError):
    """The API answered with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        body: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        self.body = body or {}
        message = str(self.body.get("message") or f"Request failed with status {status_code}")
        super().__init__(message=message, context=context)

    @property
    def error_code(self) -> Optional[str]:
        return self.body.get("error")

    @property
    def is_duplicate_email(self) -> bool:
        return self.status_code == 409 or self.error_code == DuplicateEmailError.code
