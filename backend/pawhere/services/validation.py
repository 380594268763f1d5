"""
PAWhere Backend — Registration Validation Layer
=================================================

What:  Turns an untrusted request body into a RegistrationCreate, or a
       ValidationError carrying field-level errors.
Why:   Nothing downstream should operate on a loosely shaped dict; only the
       validated, typed object reaches storage.
How:   decode_body() normalizes the raw body (JSON, or JSON encoded inside a
       JSON string); validate_registration() runs the pydantic schema and
       translates its errors into {path, message, code} entries.
Who:   RegistrationService on the server; IntakeFormController before submit.
"""

import json
import logging
from typing import Any, Dict, List, Union

from pydantic import ValidationError as PydanticValidationError

from pawhere.exceptions import FieldError, ValidationError
from pawhere.schemas.registration import RegistrationCreate

logger = logging.getLogger(__name__)


def decode_body(raw: Union[bytes, str, Dict[str, Any], None]) -> Dict[str, Any]:
    """
    Normalize a request body into a mapping.

    Some hosting adapters hand the function a body that was serialized
    twice, so a JSON string whose content is itself JSON is parsed again.

    Raises:
        ValidationError: body is empty, not JSON, or not a JSON object
    """
    value: Any = raw
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")

    # At most two passes: the body itself, then a JSON string inside it
    for _ in range(2):
        if not isinstance(value, str):
            break
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValidationError(
                errors=[FieldError(path="", message="Request body is not valid JSON", code="invalid_json")],
                context={"decode_error": str(e)},
            ) from e

    if not isinstance(value, dict):
        raise ValidationError(
            errors=[FieldError(path="", message="Request body must be a JSON object", code="invalid_json")],
            context={"body_type": type(value).__name__},
        )
    return value


def _error_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def to_field_errors(exc: PydanticValidationError) -> List[FieldError]:
    """Map pydantic errors onto the API's {path, message, code} shape."""
    return [
        FieldError(
            path=_error_path(error.get("loc", ())),
            message=error.get("msg", "Invalid value"),
            code=error.get("type", "invalid"),
        )
        for error in exc.errors()
    ]


def validate_registration(candidate: Any) -> RegistrationCreate:
    """
    Validate a candidate registration.

    Args:
        candidate: a mapping with camelCase (or snake_case) keys

    Returns:
        RegistrationCreate with every known field present

    Raises:
        ValidationError: one FieldError per failing field
    """
    if not isinstance(candidate, dict):
        raise ValidationError(
            errors=[FieldError(path="", message="Registration must be a JSON object", code="invalid_json")],
        )
    try:
        return RegistrationCreate.model_validate(candidate)
    except PydanticValidationError as e:
        errors = to_field_errors(e)
        logger.debug("Registration rejected: %s", [err.path for err in errors])
        raise ValidationError(errors=errors, context={"fields": [err.path for err in errors]}) from e
