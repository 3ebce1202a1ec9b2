"""Operator entity — an employee authorised to drive fleet vehicles."""

from dataclasses import dataclass, field
from datetime import date, datetime

# Columns an operator listing may be ordered by.
OPERATOR_SORT_FIELDS = ("first_name", "last_name", "employee_number", "department", "created_at")


@dataclass
class Operator:
    id: str
    employee_number: str
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    department: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class CurrentCar:
    """Summary of the car an operator drives right now."""

    id: str
    license_plate: str
    brand: str | None = None
    model: str | None = None
    since: date | None = None


@dataclass
class OperatorListItem:
    operator: Operator
    current_car: CurrentCar | None = None


@dataclass
class OperatorFilter:
    """Listing query.

    ``sort_by`` is one of OPERATOR_SORT_FIELDS; None orders by newest first.
    ``sort_order`` is "asc" or "desc".
    """

    search: str | None = None
    department: str | None = None
    is_active: bool | None = None
    page: int = 1
    limit: int = 20
    sort_by: str | None = None
    sort_order: str = "asc"


@dataclass
class OperatorPage:
    items: list[OperatorListItem] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    limit: int = 20

    @property
    def total_pages(self) -> int:
        return (self.total_count + self.limit - 1) // self.limit
