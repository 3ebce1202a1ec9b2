"""Assignment entity — an operator driving a car over a date range."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class Assignment:
    id: str
    car_id: str
    operator_id: str
    start_date: date
    end_date: date | None = None
    notes: str | None = None
    created_at: datetime | None = None
    created_by: str | None = None

    def is_active(self) -> bool:
        return self.end_date is None


@dataclass
class AssignmentFilter:
    """History query; every field is optional and they combine with AND.

    ``active``: True keeps only open rows, False only closed rows, None both.
    ``start_from``: keep rows whose start_date is on or after this date.
    ``end_until``: keep rows still open or closed on or before this date.
    """

    car_id: str | None = None
    operator_id: str | None = None
    active: bool | None = None
    start_from: date | None = None
    end_until: date | None = None
