"""Tests for whole-record validation."""

import pytest

from conftest import draft_data, make_draft, make_record
from customer_intake.models import CustomerDraft
from customer_intake.rules import INVALID_EMAIL, INVALID_POSTAL_CODE, with_postal_pattern
from customer_intake.validator import read_field, validate_record


class TestPostalCodeByCountry:
    @pytest.mark.parametrize("zip_code", ["12345", "12345-6789"])
    def test_us_valid(self, zip_code: str) -> None:
        draft = make_draft(address={"country": "US", "zip_code": zip_code})

        assert validate_record(draft).is_valid

    @pytest.mark.parametrize("zip_code", ["1234", "123456"])
    def test_us_invalid(self, zip_code: str) -> None:
        result = validate_record(make_draft(address={"country": "US", "zip_code": zip_code}))

        assert result.error_for("address.zip_code") == INVALID_POSTAL_CODE

    def test_india_requires_six_digits(self) -> None:
        assert validate_record(make_draft(address={"zip_code": "560001"})).is_valid
        assert not validate_record(make_draft(address={"zip_code": "56001"})).is_valid

    @pytest.mark.parametrize("zip_code", ["anything", "1", "ABC-123"])
    def test_unregistered_country_accepts_any_zip(self, zip_code: str) -> None:
        draft = make_draft(address={"country": "BR", "zip_code": zip_code})

        assert validate_record(draft).error_for("address.zip_code") is None

    def test_missing_country_falls_back_to_india(self) -> None:
        data = draft_data()
        del data["address"]["country"]
        data["address"]["zip_code"] = "12345"

        result = validate_record(data)

        assert result.error_for("address.zip_code") == INVALID_POSTAL_CODE

    def test_missing_country_uses_configured_default(self) -> None:
        data = draft_data(address={"country": "", "zip_code": "12345"})

        assert validate_record(data, default_country="US").is_valid
        assert not validate_record(data).is_valid

    def test_registered_country_rejects_empty_zip(self) -> None:
        result = validate_record(make_draft(address={"zip_code": ""}))

        assert result.error_for("address.zip_code") == INVALID_POSTAL_CODE

    def test_changing_country_reevaluates_zip(self) -> None:
        draft = make_draft(address={"country": "US", "zip_code": "12345"})
        assert validate_record(draft).is_valid

        draft.address.country = "IN"
        result = validate_record(draft)

        assert result.error_for("address.zip_code") == INVALID_POSTAL_CODE
        assert result.messages == {"address.zip_code": INVALID_POSTAL_CODE}

        draft.address.country = "DE"
        assert validate_record(draft).is_valid

    def test_custom_pattern_table(self) -> None:
        patterns = with_postal_pattern("BR", r"\d{5}-\d{3}")
        draft = make_draft(address={"country": "BR", "zip_code": "0131"})

        assert validate_record(draft).is_valid
        assert not validate_record(draft, patterns).is_valid


class TestRequiredFields:
    def test_missing_first_name_only_flags_first_name(self) -> None:
        result = validate_record(make_draft(first_name=""))

        assert result.messages == {"first_name": "First name is required"}

    def test_whitespace_counts_as_missing(self) -> None:
        result = validate_record(make_draft(last_name="   "))

        assert result.error_for("last_name") == "Last name is required"

    def test_reports_every_error_at_once(self) -> None:
        result = validate_record(CustomerDraft())

        assert result.messages == {
            "phone_number": "Phone number is required",
            "first_name": "First name is required",
            "last_name": "Last name is required",
            "email": "Email is required",
            "address.street": "Street is required",
            "address.city": "City is required",
            "address.state": "State is required",
            "address.zip_code": INVALID_POSTAL_CODE,
        }

    def test_organization_is_optional(self) -> None:
        assert validate_record(make_draft(organization=None)).is_valid
        assert "organization" not in validate_record(make_draft()).errors

    def test_every_rule_has_an_entry(self) -> None:
        result = validate_record(make_draft())

        assert result.is_valid
        assert len(result.errors) == 8
        assert all(message is None for message in result.errors.values())


class TestEmail:
    @pytest.mark.parametrize("email", ["plain", "a@", "@b.com", "a b@c.com"])
    def test_invalid_syntax(self, email: str) -> None:
        result = validate_record(make_draft(email=email))

        assert result.messages == {"email": INVALID_EMAIL}

    def test_valid_syntax(self) -> None:
        assert validate_record(make_draft(email="jane.doe+crm@acme.co.uk")).is_valid


class TestPartialInput:
    def test_partial_mapping(self) -> None:
        result = validate_record({"firstName": "Jane"})

        assert result.error_for("first_name") is None
        assert result.error_for("last_name") == "Last name is required"
        assert result.error_for("address.street") == "Street is required"

    def test_camel_case_mapping(self) -> None:
        payload = make_draft().to_payload()

        assert validate_record(payload).is_valid

    def test_none_values(self) -> None:
        result = validate_record({"email": None, "address": None})

        assert result.error_for("email") == "Email is required"
        assert result.error_for("address.zip_code") == INVALID_POSTAL_CODE

    def test_confirmed_record(self) -> None:
        assert validate_record(make_record()).is_valid


def test_read_field_nested_camel_case() -> None:
    assert read_field({"address": {"zipCode": "560001"}}, "address.zip_code") == "560001"
    assert read_field({}, "address.zip_code") is None
