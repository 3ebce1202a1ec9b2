"""Tests for assignment input parsing and date-window rules."""

from datetime import date

import pytest

from autoparc.domain.errors import PreconditionError, ValidationError
from autoparc.domain.policies.assignment_rules import (
    check_end_date,
    check_start_date_window,
    is_blank,
    is_valid_email,
    parse_iso_date,
    require,
)

TODAY = date(2025, 1, 15)


@pytest.mark.parametrize("value", [None, "", "   "])
def test_blank_values(value):
    assert is_blank(value)
    with pytest.raises(ValidationError, match="car ID is required"):
        require(value, "car ID")


def test_require_strips():
    assert require("  car-1 ", "car ID") == "car-1"


def test_parse_iso_date():
    assert parse_iso_date("2025-01-10", "start date") == date(2025, 1, 10)


@pytest.mark.parametrize("raw", ["10/01/2025", "2025-13-01", "2025-02-30", "yesterday"])
def test_parse_iso_date_rejects_malformed(raw):
    with pytest.raises(ValidationError) as exc:
        parse_iso_date(raw, "start date")
    assert exc.value.message == "invalid start date format. Expected: YYYY-MM-DD"


def test_parse_iso_date_blank_is_required_error():
    with pytest.raises(ValidationError, match="end date is required"):
        parse_iso_date("", "end date")


def test_start_window_boundary_day_allowed():
    check_start_date_window(date(2025, 1, 8), TODAY, 7)


def test_start_window_one_day_past_boundary_rejected():
    with pytest.raises(PreconditionError) as exc:
        check_start_date_window(date(2025, 1, 7), TODAY, 7)
    assert exc.value.message == "start date cannot be more than 7 days in the past"


def test_start_window_future_allowed():
    check_start_date_window(date(2030, 1, 1), TODAY, 7)


def test_start_window_custom_length():
    check_start_date_window(date(2025, 1, 15), TODAY, 0)
    with pytest.raises(PreconditionError, match="0 days"):
        check_start_date_window(date(2025, 1, 14), TODAY, 0)


def test_end_date_same_day_allowed():
    check_end_date(date(2025, 1, 10), date(2025, 1, 10))


def test_end_date_before_start_rejected():
    with pytest.raises(PreconditionError, match="end date must be on or after start date"):
        check_end_date(date(2025, 1, 9), date(2025, 1, 10))


@pytest.mark.parametrize(
    "email,ok",
    [
        ("marie.curie@fleet.example.com", True),
        ("a+b@x.io", True),
        ("not-an-email", False),
        ("missing@tld", False),
        ("@example.com", False),
    ],
)
def test_email_format(email, ok):
    assert is_valid_email(email) is ok
