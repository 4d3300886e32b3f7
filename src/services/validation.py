"""Wording for request validation failures.

Request rules live on the pydantic models in ``src.schemas.auth``. This
module turns pydantic's error list into the ``details`` strings the API
returns, keeping one message per failing field and the field order of the
request model.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from src.exceptions import ValidationError
from src.models.user import EMAIL_MAX_LENGTH, NAME_MAX_LENGTH
from src.schemas.auth import PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH

REQUIRED = "required"


def _password_messages(label: str) -> dict[str, str]:
    return {
        REQUIRED: f"{label} is required",
        "string_type": f"{label} must be a string",
        "string_too_short": f"{label} must be at least {PASSWORD_MIN_LENGTH} characters long",
        "string_too_long": f"{label} must be less than {PASSWORD_MAX_LENGTH} characters",
    }


# Keyed by the field name as it appears on the wire, then by pydantic error type.
FIELD_MESSAGES: dict[str, dict[str, str]] = {
    "email": {
        REQUIRED: "Email is required",
        "string_type": "Please provide a valid email address",
        "string_pattern_mismatch": "Please provide a valid email address",
        "string_too_long": f"Email must be less than {EMAIL_MAX_LENGTH} characters",
    },
    "password": _password_messages("Password"),
    "newPassword": _password_messages("New password"),
    "currentPassword": {
        REQUIRED: "Current password is required",
        "string_type": "Current password must be a string",
        "string_too_short": "Current password is required",
    },
    "name": {
        "string_type": "Name must be a string",
        "string_too_long": f"Name must be less than {NAME_MAX_LENGTH} characters",
    },
    "avatar": {
        "string_type": "Avatar must be a string (URL or base64)",
        "string_too_long": "Avatar data is too large (max 19MB)",
    },
}

BODY_MESSAGES = {
    "missing": "Request body is required",
    "model_attributes_type": "Request body must be a JSON object",
    "model_type": "Request body must be a JSON object",
    "dict_type": "Request body must be a JSON object",
    "json_invalid": "Request body is not valid JSON",
}


def _field_name(loc: Iterable[Any]) -> str | None:
    parts = [part for part in loc if part != "body"]
    return str(parts[-1]) if parts else None


def describe_error(error: Mapping[str, Any]) -> str:
    """Return the API message for one pydantic error."""
    error_type = error.get("type", "")
    field = _field_name(error.get("loc", ()))

    if field is None:
        return BODY_MESSAGES.get(error_type, error.get("msg", "Invalid request"))

    messages = FIELD_MESSAGES.get(field, {})
    is_empty = error_type == "missing" or error.get("input") in ("", None)
    if is_empty and REQUIRED in messages:
        return messages[REQUIRED]
    return messages.get(error_type, error.get("msg", "Invalid value"))


def validation_details(errors: Iterable[Mapping[str, Any]]) -> list[str]:
    """Describe every error, dropping repeats."""
    details: list[str] = []
    for error in errors:
        message = describe_error(error)
        if message not in details:
            details.append(message)
    return details


def validation_error(errors: Iterable[Mapping[str, Any]]) -> ValidationError:
    """Build the API error for a failed request body."""
    return ValidationError(validation_details(errors))
