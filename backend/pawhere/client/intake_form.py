"""
PAWhere Client — Multi-step Intake Form Controller
====================================================

What:  Drives the early-access / VIP tester survey one step at a time and
       submits the collected answers through IntakeApiClient.
Why:   The landing page asks 4 short screens of questions plus a review
       screen; each screen must be complete before the user moves on, and a
       submission must never leave the page in a half-reset state.
How:   Answers live in an IntakeAnswers model. Each step has a gate that
       lists the answers it still misses. submit() re-checks every gate and
       the shared registration schema, then calls the API and turns the
       outcome into a user-facing Notice.
Who:   The landing page modal (hero "Get Early Access" and the VIP button).

Steps:
    0  Contact Info       email, phone
    1  Background         ownsPet; if "yes": pet type, outdoor frequency,
                          has lost a pet
    2  Current Solutions  tracking solution, safety worries, current methods
    3  Expectations       1-2 important features, challenges, rating, wish
    4  Confirmation       review, then submit

Outcomes of submit():
    SUCCESS        notice, answers cleared (VIP flag kept), back to step 0,
                   close signal emitted
    DUPLICATE      soft "Already Registered" notice, stays on confirmation
    NETWORK_ERROR  "check your connection" notice, stays on confirmation
    FAILED         destructive notice with the server message
    INCOMPLETE     jumps to the first step that is missing answers
"""

import enum
import logging
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel, to_snake

from pawhere.client.api import IntakeApiClient
from pawhere.exceptions import ApiResponseError, TransientNetworkError, ValidationError
from pawhere.schemas.registration import (
    ARRAY_FIELDS,
    MAX_IMPORTANT_FEATURES,
    OTHER_TAG,
    OutdoorFrequency,
    YesNo,
)
from pawhere.services.validation import validate_registration

logger = logging.getLogger(__name__)


STEPS = ("Contact Info", "Background", "Current Solutions", "Expectations", "Confirmation")
CONFIRMATION_STEP = len(STEPS) - 1

# Which step asks which question; used to send the user back to the right
# screen when the shared schema rejects an answer
STEP_FIELDS = {
    0: ("email", "phone", "is_vip"),
    1: ("owns_pet", "pet_type", "pet_type_other", "outdoor_frequency", "has_lost_pet", "how_found_pet"),
    2: (
        "uses_tracking_solution",
        "tracking_solution_details",
        "safety_worries",
        "safety_worries_other",
        "current_safety_methods",
    ),
    3: (
        "important_features",
        "expected_challenges",
        "expected_challenges_other",
        "usefulness_rating",
        "wish_feature",
    ),
}

# Follow-up questions shown only for a specific answer to a parent question
_FOLLOW_UPS = {
    ("owns_pet", "yes"): ("pet_type", "pet_type_other", "outdoor_frequency", "has_lost_pet", "how_found_pet"),
    ("has_lost_pet", "yes"): ("how_found_pet",),
    ("uses_tracking_solution", "yes"): ("tracking_solution_details",),
}


class IntakeAnswers(BaseModel):
    """Answers collected so far. Unanswered questions are None or empty."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    email: str = ""
    phone: str = ""
    is_vip: bool = False

    owns_pet: Optional[YesNo] = None
    pet_type: List[str] = []
    pet_type_other: str = ""
    outdoor_frequency: Optional[OutdoorFrequency] = None
    has_lost_pet: Optional[YesNo] = None
    how_found_pet: str = ""

    uses_tracking_solution: Optional[YesNo] = None
    tracking_solution_details: str = ""
    safety_worries: List[str] = []
    safety_worries_other: str = ""
    current_safety_methods: str = ""

    important_features: List[str] = []
    expected_challenges: List[str] = []
    expected_challenges_other: str = ""
    usefulness_rating: Optional[int] = None
    wish_feature: str = ""

    def to_payload(self) -> Dict[str, Any]:
        """
        camelCase request body. Unanswered questions and follow-ups whose
        parent answer hides them are left out.
        """
        hidden = set()
        for (parent, shown_for), children in _FOLLOW_UPS.items():
            if getattr(self, parent) != shown_for:
                hidden.update(children)

        payload: Dict[str, Any] = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            if name in hidden or value is None:
                continue
            if isinstance(value, str):
                value = value.strip()
                if not value:
                    continue
            if isinstance(value, list) and not value:
                continue
            payload[to_camel(name)] = list(value) if isinstance(value, list) else value
        return payload


class Notice(BaseModel):
    """A toast shown to the user after a submit attempt."""
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


class SubmitOutcome(str, enum.Enum):
    SUCCESS = "success"
    DUPLICATE = "duplicate"
    NETWORK_ERROR = "network_error"
    FAILED = "failed"
    INCOMPLETE = "incomplete"
    IN_PROGRESS = "in_progress"


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def _chosen(values: List[str], other_text: str = "") -> bool:
    """A multi-select is answered by a listed choice or by filled-in "other" text."""
    return any(v != OTHER_TAG for v in values) or not _blank(other_text)


class IntakeFormController:
    """
    Usage:
        controller = IntakeFormController(api, is_vip=True, notify=show_toast, on_close=close_modal)
        controller.set_answer("email", "owner@pawhere.io")
        controller.set_answer("phone", "+1 555 0100")
        controller.next()
        ...
        outcome = await controller.submit()
    """

    def __init__(
        self,
        api: IntakeApiClient,
        is_vip: bool = False,
        notify: Optional[Callable[[Notice], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
    ):
        self.api = api
        self.is_vip = is_vip
        self.answers = IntakeAnswers(is_vip=is_vip)
        self.current_step = 0
        self.is_submitting = False
        self.notices: List[Notice] = []
        self._notify = notify
        self._on_close = on_close

    # ── Navigation ────────────────────────────────────────────────────────

    @property
    def step_title(self) -> str:
        return STEPS[self.current_step]

    @property
    def on_confirmation(self) -> bool:
        return self.current_step == CONFIRMATION_STEP

    def missing_fields(self, step: Optional[int] = None) -> List[str]:
        """Names of the answers the step still needs; empty when complete."""
        step = self.current_step if step is None else step
        a = self.answers
        missing: List[str] = []

        if step == 0:
            if _blank(a.email):
                missing.append("email")
            if _blank(a.phone):
                missing.append("phone")
        elif step == 1:
            if a.owns_pet is None:
                missing.append("owns_pet")
            elif a.owns_pet == "yes":
                if not _chosen(a.pet_type, a.pet_type_other):
                    missing.append("pet_type")
                if a.outdoor_frequency is None:
                    missing.append("outdoor_frequency")
                if a.has_lost_pet is None:
                    missing.append("has_lost_pet")
        elif step == 2:
            if a.uses_tracking_solution is None:
                missing.append("uses_tracking_solution")
            if not _chosen(a.safety_worries, a.safety_worries_other):
                missing.append("safety_worries")
            if _blank(a.current_safety_methods):
                missing.append("current_safety_methods")
        elif step == 3:
            if not 1 <= len(a.important_features) <= MAX_IMPORTANT_FEATURES:
                missing.append("important_features")
            if not _chosen(a.expected_challenges, a.expected_challenges_other):
                missing.append("expected_challenges")
            if a.usefulness_rating is None:
                missing.append("usefulness_rating")
            if _blank(a.wish_feature):
                missing.append("wish_feature")
        return missing

    def can_advance(self) -> bool:
        return not self.missing_fields()

    def next(self) -> bool:
        """Move forward one step if the current one is complete."""
        if self.on_confirmation or not self.can_advance():
            return False
        self.current_step += 1
        return True

    def previous(self) -> bool:
        """Move back one step. Never gated; answers are kept."""
        if self.current_step == 0:
            return False
        self.current_step -= 1
        return True

    def first_incomplete_step(self) -> Optional[int]:
        for step in range(CONFIRMATION_STEP):
            if self.missing_fields(step):
                return step
        return None

    # ── Answers ───────────────────────────────────────────────────────────

    def set_answer(self, field: str, value: Any) -> None:
        """Set one answer. Accepts snake_case or camelCase field names."""
        name = to_snake(field)
        if name not in IntakeAnswers.model_fields:
            raise KeyError(f"Unknown survey field: {field}")
        setattr(self.answers, name, value)

    def toggle(self, field: str, value: str) -> bool:
        """
        Add or remove a choice in a multi-select answer.

        Returns False when nothing changed: adding a third important
        feature is refused.
        """
        name = to_snake(field)
        if name not in ARRAY_FIELDS:
            raise KeyError(f"Not a multi-select field: {field}")

        current = list(getattr(self.answers, name))
        if value in current:
            current.remove(value)
        else:
            if name == "important_features" and len(current) >= MAX_IMPORTANT_FEATURES:
                return False
            current.append(value)
        setattr(self.answers, name, current)
        return True

    def reset(self) -> None:
        """Clear every answer except the VIP flag and return to the first step."""
        self.answers = IntakeAnswers(is_vip=self.is_vip)
        self.current_step = 0

    # ── Submission ────────────────────────────────────────────────────────

    def _emit(self, notice: Notice) -> None:
        self.notices.append(notice)
        if self._notify is not None:
            self._notify(notice)

    def _step_for(self, path: str) -> int:
        name = to_snake(path.split(".")[0]) if path else ""
        for step, fields in STEP_FIELDS.items():
            if name in fields:
                return step
        return 0

    async def submit(self) -> SubmitOutcome:
        """
        Submit the answers from the confirmation step.

        Raises:
            RuntimeError: called before reaching the confirmation step
        """
        if not self.on_confirmation:
            raise RuntimeError("submit() is only available on the confirmation step")
        if self.is_submitting:
            return SubmitOutcome.IN_PROGRESS

        incomplete = self.first_incomplete_step()
        if incomplete is not None:
            self.current_step = incomplete
            self._emit(Notice(
                title="Missing answers",
                description=f"Please complete the {STEPS[incomplete]} step.",
                variant="destructive",
            ))
            return SubmitOutcome.INCOMPLETE

        payload = self.answers.to_payload()
        try:
            validate_registration(payload)
        except ValidationError as e:
            first = e.errors[0] if e.errors else None
            self.current_step = self._step_for(first.path if first else "")
            self._emit(Notice(
                title="Please check your answers",
                description=first.message if first else e.message,
                variant="destructive",
            ))
            return SubmitOutcome.INCOMPLETE

        self.is_submitting = True
        try:
            await self.api.register(payload)
        except ApiResponseError as e:
            if e.is_duplicate_email:
                self._emit(Notice(
                    title="Already Registered",
                    description="This email is already registered. You'll be contacted soon!",
                ))
                return SubmitOutcome.DUPLICATE
            logger.warning("Registration failed with status %d: %s", e.status_code, e.message)
            self._emit(Notice(title="Error", description=e.message, variant="destructive"))
            return SubmitOutcome.FAILED
        except TransientNetworkError as e:
            self._emit(Notice(title="Error", description=e.message, variant="destructive"))
            return SubmitOutcome.NETWORK_ERROR
        finally:
            self.is_submitting = False

        self._emit(Notice(
            title="Success!",
            description="We'll contact you soon with early access details.",
        ))
        self.reset()
        if self._on_close is not None:
            self._on_close()
        return SubmitOutcome.SUCCESS
