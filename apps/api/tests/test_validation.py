"""Tests for declarative validation rules and the entity schemas."""
from __future__ import annotations

from rentboard.services.apartments import APARTMENT_SCHEMA
from rentboard.services.bookings import BOOKING_DRAFT_SCHEMA
from rentboard.services.profile import PROFILE_SCHEMA
from rentboard.services.validation import (
    AtLeastOneOf,
    Compare,
    MinLength,
    NumericRange,
    Required,
    ValidationSchema,
    validate,
)


def _profile(**overrides) -> dict:
    record = {"name": "Aruzhan", "surname": "Sadykova", "budget_range": {"min": 50000, "max": 150000}}
    record.update(overrides)
    return record


def _draft(**overrides) -> dict:
    record = {
        "apartmentId": "1",
        "check_in_date": "2025-06-01",
        "check_out_date": "2025-06-10",
        "message": "",
    }
    record.update(overrides)
    return record


def test_valid_profile_passes() -> None:
    result = validate(_profile(), PROFILE_SCHEMA)

    assert result.valid
    assert result.errors == []


def test_all_violations_are_reported() -> None:
    record = _profile(name="", surname=" ", budget_range={"min": 500, "max": 100})

    result = validate(record, PROFILE_SCHEMA)

    assert not result.valid
    assert result.errors == [
        "Name is required",
        "Surname is required",
        "Maximum value must be greater than minimum value",
    ]
    assert result.field_errors["budget_range.max"] == ["Maximum value must be greater than minimum value"]


def test_budget_bounds() -> None:
    zero_max = validate(_profile(budget_range={"min": None, "max": 0}), PROFILE_SCHEMA)
    negative_min = validate(_profile(budget_range={"min": -1, "max": 100}), PROFILE_SCHEMA)

    assert zero_max.errors == ["Maximum value must be greater than 0"]
    assert negative_min.errors == ["Minimum value must be 0 or greater"]


def test_compare_skips_blank_side() -> None:
    result = validate(_profile(budget_range={"min": None, "max": 100}), PROFILE_SCHEMA)

    assert result.valid


def test_booking_dates_must_be_ordered() -> None:
    reversed_dates = validate(_draft(check_out_date="2025-05-20"), BOOKING_DRAFT_SCHEMA)
    same_day = validate(_draft(check_out_date="2025-06-01"), BOOKING_DRAFT_SCHEMA)

    assert reversed_dates.field_errors == {
        "check_out_date": ["Check-out date must be after check-in date"]
    }
    assert not same_day.valid


def test_rule_errors_shadow_model_errors_on_same_field() -> None:
    result = validate(_draft(check_in_date=None), BOOKING_DRAFT_SCHEMA)

    assert result.errors == ["Check-in date is required"]


def test_model_errors_are_reported_with_their_path() -> None:
    result = validate(_draft(message="x" * 1001), BOOKING_DRAFT_SCHEMA)

    assert not result.valid
    assert list(result.field_errors) == ["message"]
    assert result.errors[0].startswith("message: ")


def test_apartment_schema_flags_missing_contact(demo_apartments) -> None:
    record = {**demo_apartments[0], "contact_phone": "", "contact_telegram": ""}

    result = validate(record, APARTMENT_SCHEMA)

    assert result.errors == ["Provide a phone number or a Telegram contact"]
    assert validate(demo_apartments[0], APARTMENT_SCHEMA).valid


def test_individual_rules() -> None:
    schema = ValidationSchema(
        rules=(
            Required("title"),
            MinLength("code", 3),
            NumericRange("rooms", minimum=1, maximum=10),
            Compare("end", ">", "start", "End must be after start"),
            AtLeastOneOf(("phone", "email"), "Contact needed"),
        )
    )

    result = validate({"code": "ab", "rooms": "many", "start": 5, "end": 5}, schema)

    assert result.errors == [
        "Title is required",
        "Code must have at least 3 characters",
        "Rooms must be a number",
        "End must be after start",
        "Contact needed",
    ]
    assert validate({"title": "x", "code": "abc", "rooms": 11, "phone": "1"}, schema).errors == [
        "Rooms must be between 1 and 10"
    ]
