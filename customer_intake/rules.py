"""Static field rules for customer records.

Postal codes are validated against a per-country pattern table. Countries that
are not in the table accept any postal code.
"""

import re
from types import MappingProxyType
from typing import Mapping

DEFAULT_COUNTRY = "IN"

_ASCII = re.ASCII

POSTAL_CODE_PATTERNS: Mapping[str, re.Pattern[str]] = MappingProxyType(
    {
        "US": re.compile(r"[0-9]{5}(-[0-9]{4})?", _ASCII),
        "CA": re.compile(r"[A-Za-z]\d[A-Za-z][ -]?\d[A-Za-z]\d", _ASCII),
        "UK": re.compile(r"[A-Z]{1,2}\d[A-Z\d]? \d[A-Z]{2}|GIR 0AA", _ASCII),
        "DE": re.compile(r"\d{5}", _ASCII),
        "FR": re.compile(r"\d{5}", _ASCII),
        "AU": re.compile(r"\d{4}", _ASCII),
        "IN": re.compile(r"\d{6}", _ASCII),
    }
)

INVALID_POSTAL_CODE = "Invalid zip/postal code"
INVALID_EMAIL = "Invalid email format"

# field path -> message shown when the value is blank
REQUIRED_FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "phone_number": "Phone number is required",
        "first_name": "First name is required",
        "last_name": "Last name is required",
        "email": "Email is required",
        "address.street": "Street is required",
        "address.city": "City is required",
        "address.state": "State is required",
    }
)

FIELD_PATHS: tuple[str, ...] = (
    "phone_number",
    "first_name",
    "last_name",
    "email",
    "address.street",
    "address.city",
    "address.state",
    "address.zip_code",
    "address.country",
    "organization",
)


def normalize_country(country: str | None, default_country: str = DEFAULT_COUNTRY) -> str:
    """Return the upper-cased country code, or ``default_country`` when blank."""

    if country is None or not str(country).strip():
        return default_country.strip().upper()
    return str(country).strip().upper()


def postal_pattern_for(
    country: str | None,
    patterns: Mapping[str, re.Pattern[str]] = POSTAL_CODE_PATTERNS,
    default_country: str = DEFAULT_COUNTRY,
) -> re.Pattern[str] | None:
    """Return the postal code pattern registered for ``country``, if any."""

    return patterns.get(normalize_country(country, default_country))


def with_postal_pattern(
    country: str,
    pattern: str | re.Pattern[str],
    patterns: Mapping[str, re.Pattern[str]] = POSTAL_CODE_PATTERNS,
) -> Mapping[str, re.Pattern[str]]:
    """Return a copy of ``patterns`` with an extra (or replaced) country entry."""

    compiled = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern, _ASCII)
    extended = dict(patterns)
    extended[normalize_country(country)] = compiled
    return MappingProxyType(extended)


def is_blank(value: object) -> bool:
    return value is None or not str(value).strip()
