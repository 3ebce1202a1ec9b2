"""Assignment rules — input parsing and date-window checks."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from autoparc.domain.errors import PreconditionError, ValidationError

DEFAULT_BACKDATE_DAYS = 7

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def require(value: str | None, label: str) -> str:
    """Return *value* stripped, or raise ValidationError("<label> is required")."""
    if is_blank(value):
        raise ValidationError(f"{label} is required")
    return value.strip()


def parse_iso_date(raw: str | None, label: str) -> date:
    """Parse a ``YYYY-MM-DD`` calendar date.

    Args:
        raw: the boundary value, e.g. ``"2025-01-10"``.
        label: human name used in error messages ("start date").

    Raises:
        ValidationError: if *raw* is blank or not an ISO calendar date.
    """
    value = require(raw, label)
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(
            f"invalid {label} format. Expected: YYYY-MM-DD"
        ) from None


def check_start_date_window(
    start_date: date, today: date, max_backdate_days: int = DEFAULT_BACKDATE_DAYS
) -> None:
    """Reject start dates more than *max_backdate_days* before *today*.

    The boundary day itself is allowed; future dates are unbounded.
    """
    earliest = today - timedelta(days=max_backdate_days)
    if start_date < earliest:
        raise PreconditionError(
            f"start date cannot be more than {max_backdate_days} days in the past"
        )


def check_end_date(end_date: date, start_date: date) -> None:
    if end_date < start_date:
        raise PreconditionError("end date must be on or after start date")


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email.strip()))
