"""Whole-record validation for customer drafts.

Validation is a pure function of the candidate record. The postal code rule
depends on the record's own ``address.country`` value, so callers re-run the
whole validation on every change instead of validating fields in isolation.
"""

import re
from typing import Any, Mapping

from pydantic import BaseModel, EmailStr, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from customer_intake.models import ValidationResult
from customer_intake.rules import (
    DEFAULT_COUNTRY,
    INVALID_EMAIL,
    INVALID_POSTAL_CODE,
    POSTAL_CODE_PATTERNS,
    REQUIRED_FIELDS,
    is_blank,
    postal_pattern_for,
)

_email_adapter = TypeAdapter(EmailStr)

Candidate = BaseModel | Mapping[str, Any]


def _pick(data: Mapping[str, Any], name: str) -> Any:
    if name in data:
        return data[name]
    return data.get(to_camel(name))


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, Mapping):
        return value
    return {}


def read_field(record: Candidate, path: str) -> Any:
    """Return the value at a dotted snake_case path, accepting camelCase keys too."""

    current: Any = record
    for part in path.split("."):
        current = _pick(_as_mapping(current), part)
        if current is None:
            return None
    return current


def is_valid_email(value: str) -> bool:
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def validate_email(value: Any) -> str | None:
    if is_blank(value):
        return REQUIRED_FIELDS["email"]
    if not is_valid_email(str(value).strip()):
        return INVALID_EMAIL
    return None


def validate_postal_code(
    zip_code: Any,
    country: str | None,
    patterns: Mapping[str, re.Pattern[str]] = POSTAL_CODE_PATTERNS,
    default_country: str = DEFAULT_COUNTRY,
) -> str | None:
    pattern = postal_pattern_for(country, patterns, default_country)
    if pattern is None:
        return None
    if pattern.fullmatch("" if zip_code is None else str(zip_code)):
        return None
    return INVALID_POSTAL_CODE


def validate_record(
    record: Candidate,
    patterns: Mapping[str, re.Pattern[str]] = POSTAL_CODE_PATTERNS,
    default_country: str = DEFAULT_COUNTRY,
) -> ValidationResult:
    """Run every field rule against ``record`` and collect all errors.

    Args:
        record: A draft, a confirmed record, or a partial mapping of form input.
        patterns: Country to postal code pattern table.
        default_country: Country used when the record has none.

    Returns:
        A ValidationResult with one entry per rule.
    """
    data = _as_mapping(record)
    errors: dict[str, str | None] = {}
    for path, message in REQUIRED_FIELDS.items():
        if path == "email":
            continue
        errors[path] = message if is_blank(read_field(data, path)) else None

    errors["email"] = validate_email(read_field(data, "email"))
    errors["address.zip_code"] = validate_postal_code(
        read_field(data, "address.zip_code"),
        read_field(data, "address.country"),
        patterns,
        default_country,
    )
    return ValidationResult(errors=errors)
