"""
PAWhere Backend — Registration Request/Response Schemas
=========================================================

What:  Pydantic models defining the registration API contract.
Why:   One declarative description of required/optional fields, enumerated
       answers and multi-select arrays, shared by the server endpoint and
       the survey client.
How:   Python attributes are snake_case; the wire format is camelCase via an
       alias generator. Either spelling is accepted on input.
Who:   The validation layer, RegistrationStore, route handlers and the
       intake form controller.

Normalisation rules (RegistrationCreate):
    - email is required, must be a bare local@domain.tld address, and is
      stored exactly as submitted (trimmed)
    - enumerated answers accept only their listed values; absent/null is
      "not answered"
    - array answers must be lists of strings; any non-list value becomes
      null instead of failing the submission
    - free-text answers are stripped; blank becomes null
    - usefulness_rating is an integer in 1..10
    - unknown keys are ignored
"""

import uuid
from datetime import datetime
from typing import Any, List, Literal, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from pawhere.exceptions import FieldError

YesNo = Literal["yes", "no"]
OutdoorFrequency = Literal["rarely", "sometimes", "often"]

# ── Survey catalogs ───────────────────────────────────────────────────────
# The client offers these choices; the server stores whatever tags arrive.
OTHER_TAG = "other"

PET_TYPES = ("Dog", "Cat")
OUTDOOR_FREQUENCIES = {
    "rarely": "Rarely (mostly indoors)",
    "sometimes": "Sometimes (walks / play)",
    "often": "Often (roams freely)",
}
SAFETY_WORRIES = ("Getting lost", "Stolen", "Injured while outside")
IMPORTANT_FEATURES = (
    "GPS tracking accuracy",
    "Long battery life",
    "Geofencing alerts (when pet leaves safe zone)",
    "Small & comfortable device size",
    "Mobile app usability",
    "Price",
)
EXPECTED_CHALLENGES = (
    "Complicated setup",
    "Battery charging too often",
    "Weak signal or GPS coverage",
    "Not comfortable for my pet",
)

# Product rule, enforced by the client only
MAX_IMPORTANT_FEATURES = 2

ARRAY_FIELDS = ("pet_type", "safety_worries", "important_features", "expected_challenges")
TEXT_FIELDS = (
    "phone",
    "pet_type_other",
    "how_found_pet",
    "tracking_solution_details",
    "safety_worries_other",
    "current_safety_methods",
    "expected_challenges_other",
    "wish_feature",
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RegistrationCreate(_CamelModel):
    """
    A validated, normalised registration ready for insertion.

    Every known field is present after validation; None means the question
    was not answered.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    email: str
    phone: Optional[str] = None
    is_vip: bool = False

    # Section 1: Background
    owns_pet: Optional[YesNo] = None
    pet_type: Optional[List[str]] = None
    pet_type_other: Optional[str] = None
    outdoor_frequency: Optional[OutdoorFrequency] = None
    has_lost_pet: Optional[YesNo] = None
    how_found_pet: Optional[str] = None

    # Section 2: Current solutions & pain points
    uses_tracking_solution: Optional[YesNo] = None
    tracking_solution_details: Optional[str] = None
    safety_worries: Optional[List[str]] = None
    safety_worries_other: Optional[str] = None
    current_safety_methods: Optional[str] = None

    # Section 3: Expectations
    important_features: Optional[List[str]] = None
    expected_challenges: Optional[List[str]] = None
    expected_challenges_other: Optional[str] = None
    usefulness_rating: Optional[int] = Field(default=None, ge=1, le=10)
    wish_feature: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def check_email_format(cls, v: str) -> str:
        """
        Accept only a bare local@domain.tld address and keep it as typed.

        Display-name forms ("Bob <bob@pawhere.io>") are rejected, and the
        library's normalised spelling is discarded so uniqueness stays exact.
        """
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email address: {e}") from e
        return v

    @field_validator("is_vip", mode="before")
    @classmethod
    def default_vip(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator(*ARRAY_FIELDS, mode="before")
    @classmethod
    def lenient_array(cls, v: Any) -> Any:
        # Partial client submissions sometimes send "" or an object here
        if isinstance(v, (list, tuple)):
            return list(v)
        return None

    @field_validator("owns_pet", "has_lost_pet", "uses_tracking_solution", "outdoor_frequency", mode="before")
    @classmethod
    def empty_choice_to_none(cls, v: Any) -> Any:
        return None if v == "" else v

    @field_validator("usefulness_rating", mode="before")
    @classmethod
    def reject_bool_rating(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("Rating must be a whole number between 1 and 10")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class RegistrationRecord(_CamelModel):
    """
    Full stored registration, as listed by GET /api/registrations.

    Built from the ORM row; array answers come back in insertion order.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: uuid.UUID
    email: str
    phone: Optional[str] = None
    is_vip: bool = False

    owns_pet: Optional[str] = None
    pet_type: Optional[List[str]] = None
    pet_type_other: Optional[str] = None
    outdoor_frequency: Optional[str] = None
    has_lost_pet: Optional[str] = None
    how_found_pet: Optional[str] = None

    uses_tracking_solution: Optional[str] = None
    tracking_solution_details: Optional[str] = None
    safety_worries: Optional[List[str]] = None
    safety_worries_other: Optional[str] = None
    current_safety_methods: Optional[str] = None

    important_features: Optional[List[str]] = None
    expected_challenges: Optional[List[str]] = None
    expected_challenges_other: Optional[str] = None
    usefulness_rating: Optional[int] = None
    wish_feature: Optional[str] = None

    created_at: datetime

    @field_validator("is_vip", mode="before")
    @classmethod
    def default_vip(cls, v: Any) -> Any:
        return False if v is None else v


class RegistrationSummary(_CamelModel):
    """Minimal projection echoed after a successful registration."""
    id: uuid.UUID
    email: str
    is_vip: bool


class RegistrationCreatedResponse(BaseModel):
    """201 body of POST /api/register. Survey answers are not echoed back."""
    message: str = Field(default="Registration successful")
    registration: RegistrationSummary


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ValidationErrorResponse(BaseModel):
    message: str = Field(default="Invalid registration data")
    errors: List[FieldError]
    request_id: Optional[str] = None


class DuplicateEmailResponse(BaseModel):
    message: str = Field(default="Email already registered")
    error: str = Field(default="DUPLICATE_EMAIL")
    request_id: Optional[str] = None


class InternalErrorResponse(BaseModel):
    message: str = Field(default="Internal server error")
    error: Optional[str] = Field(
        default=None,
        description="Underlying error text; omitted in production",
    )
    request_id: Optional[str] = None


class HealthResponse(BaseModel):
    """Liveness probe answer used by the deployment tooling."""
    ok: bool
    database: Optional[str] = None
    error: Optional[str] = None
    timestamp: Optional[datetime] = None
