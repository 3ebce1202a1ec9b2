"""Pytest configuration, in-memory fakes and shared fixtures."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import date, datetime, timezone

import pytest

from autoparc.application.ports.assignment_repo import (
    ActiveAssignmentExists,
    AssignmentRepository,
)
from autoparc.application.ports.audit_sink import AuditSink
from autoparc.application.ports.car_lookup import CarLookup
from autoparc.application.ports.operator_repo import (
    DuplicateEmployeeNumber,
    OperatorRepository,
)
from autoparc.application.use_cases.assignment_engine import AssignmentEngine
from autoparc.application.use_cases.manage_operators import ManageOperatorsUseCase
from autoparc.domain.entities.assignment import Assignment, AssignmentFilter
from autoparc.domain.entities.audit_entry import AuditEntry
from autoparc.domain.entities.car import Car
from autoparc.domain.entities.operator import (
    CurrentCar,
    Operator,
    OperatorFilter,
    OperatorListItem,
)
from autoparc.domain.value_objects.enums import CarStatus

TODAY = date(2025, 1, 5)

# ─── In-memory fakes ────────────────────────────────────────────────


class FakeAssignmentRepo(AssignmentRepository):
    """Dict-backed store that enforces the open-row uniqueness like the DB index.

    Every method yields to the event loop before touching state so that
    concurrent callers interleave. ``stale_reads`` makes the find_active_*
    lookups miss, forcing conflicts onto the insert path.
    """

    def __init__(self):
        self.rows: dict[str, Assignment] = {}
        self.commits = 0
        self.stale_reads = False

    async def insert(self, assignment):
        await asyncio.sleep(0)
        for row in self.rows.values():
            if row.end_date is not None:
                continue
            if row.car_id == assignment.car_id:
                raise ActiveAssignmentExists("car")
            if row.operator_id == assignment.operator_id:
                raise ActiveAssignmentExists("operator")
        self.rows[assignment.id] = replace(assignment)
        return assignment

    async def find_active_by_car(self, car_id):
        await asyncio.sleep(0)
        if self.stale_reads:
            return None
        return next(
            (replace(r) for r in self.rows.values() if r.car_id == car_id and r.end_date is None),
            None,
        )

    async def find_active_by_operator(self, operator_id):
        await asyncio.sleep(0)
        if self.stale_reads:
            return None
        return next(
            (
                replace(r)
                for r in self.rows.values()
                if r.operator_id == operator_id and r.end_date is None
            ),
            None,
        )

    async def close_active(self, assignment_id, end_date, notes):
        await asyncio.sleep(0)
        row = self.rows.get(assignment_id)
        if row is None or row.end_date is not None:
            return False
        row.end_date = end_date
        if notes is not None:
            row.notes = notes
        return True

    async def query_history(self, filters: AssignmentFilter):
        await asyncio.sleep(0)
        rows = list(self.rows.values())
        if filters.car_id is not None:
            rows = [r for r in rows if r.car_id == filters.car_id]
        if filters.operator_id is not None:
            rows = [r for r in rows if r.operator_id == filters.operator_id]
        if filters.active is True:
            rows = [r for r in rows if r.end_date is None]
        elif filters.active is False:
            rows = [r for r in rows if r.end_date is not None]
        if filters.start_from is not None:
            rows = [r for r in rows if r.start_date >= filters.start_from]
        if filters.end_until is not None:
            rows = [r for r in rows if r.end_date is None or r.end_date <= filters.end_until]
        rows.sort(key=lambda r: (r.start_date, r.created_at), reverse=True)
        return [replace(r) for r in rows]

    async def commit(self):
        self.commits += 1

    def open_rows(self, *, car_id=None, operator_id=None) -> list[Assignment]:
        return [
            r
            for r in self.rows.values()
            if r.end_date is None
            and (car_id is None or r.car_id == car_id)
            and (operator_id is None or r.operator_id == operator_id)
        ]


class FakeCarLookup(CarLookup):
    def __init__(self, cars: list[Car]):
        self.cars = {c.id: c for c in cars}

    async def get_by_id(self, car_id):
        await asyncio.sleep(0)
        return self.cars.get(car_id)


class FakeOperatorRepo(OperatorRepository):
    """Operators in a dict; listings read current cars from the given fakes."""

    def __init__(
        self,
        operators: list[Operator],
        assignments: FakeAssignmentRepo | None = None,
        cars: FakeCarLookup | None = None,
    ):
        self.operators = {o.id: o for o in operators}
        self.assignments = assignments
        self.cars = cars
        self.commits = 0
        self.stale_reads = False

    async def save(self, operator):
        if any(o.employee_number == operator.employee_number for o in self.operators.values()):
            raise DuplicateEmployeeNumber(operator.employee_number)
        self.operators[operator.id] = replace(operator)
        return operator

    async def get_by_id(self, operator_id):
        await asyncio.sleep(0)
        o = self.operators.get(operator_id)
        return replace(o) if o else None

    async def get_by_employee_number(self, employee_number):
        if self.stale_reads:
            return None
        o = next(
            (o for o in self.operators.values() if o.employee_number == employee_number), None
        )
        return replace(o) if o else None

    async def find_all(self, filters: OperatorFilter):
        items = list(self.operators.values())
        if filters.is_active is not None:
            items = [o for o in items if o.is_active == filters.is_active]
        if filters.department:
            items = [o for o in items if o.department == filters.department]
        if filters.search:
            needle = filters.search.lower()
            items = [
                o
                for o in items
                if any(
                    needle in (v or "").lower()
                    for v in (o.first_name, o.last_name, o.employee_number, o.email)
                )
            ]
        if filters.sort_by:
            items.sort(
                key=lambda o: (getattr(o, filters.sort_by) is None, getattr(o, filters.sort_by)),
                reverse=filters.sort_order == "desc",
            )
        else:
            items.sort(key=lambda o: o.created_at, reverse=True)
        start = (filters.page - 1) * filters.limit
        page = items[start:start + filters.limit]
        return [
            OperatorListItem(operator=replace(o), current_car=self._current_car(o.id))
            for o in page
        ], len(items)

    def _current_car(self, operator_id) -> CurrentCar | None:
        if self.assignments is None or self.cars is None:
            return None
        open_rows = self.assignments.open_rows(operator_id=operator_id)
        if not open_rows:
            return None
        car = self.cars.cars[open_rows[0].car_id]
        return CurrentCar(
            id=car.id,
            license_plate=car.license_plate,
            brand=car.brand,
            model=car.model,
            since=open_rows[0].start_date,
        )

    async def update(self, operator_id, values):
        o = self.operators[operator_id]
        for key, value in values.items():
            setattr(o, key, value)
        o.updated_at = datetime.now(timezone.utc)

    async def soft_delete(self, operator_id):
        await self.update(operator_id, {"is_active": False})

    async def commit(self):
        self.commits += 1


class FakeAuditSink(AuditSink):
    def __init__(self, fail: bool = False):
        self.entries: list[AuditEntry] = []
        self.fail = fail

    async def record(self, entry):
        if self.fail:
            raise RuntimeError("audit store unavailable")
        self.entries.append(entry)


# ─── Builders ───────────────────────────────────────────────────────


def make_car(car_id: str, status: CarStatus = CarStatus.ACTIVE) -> Car:
    return Car(id=car_id, license_plate=f"PL-{car_id.upper()}", brand="Renault", model="Kangoo", status=status)


def make_operator(
    operator_id: str, number: str | None = None, is_active: bool = True, **kwargs
) -> Operator:
    return Operator(
        id=operator_id,
        employee_number=number or f"EMP-{operator_id}",
        first_name=kwargs.pop("first_name", "Jean"),
        last_name=kwargs.pop("last_name", f"Dupont-{operator_id}"),
        is_active=is_active,
        created_at=kwargs.pop("created_at", datetime(2024, 6, 1, tzinfo=timezone.utc)),
        **kwargs,
    )


# ─── Fixtures ───────────────────────────────────────────────────────


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def assignment_repo() -> FakeAssignmentRepo:
    return FakeAssignmentRepo()


@pytest.fixture
def car_lookup() -> FakeCarLookup:
    return FakeCarLookup(
        [
            make_car("car-x"),
            make_car("car-y"),
            make_car("car-maint", CarStatus.MAINTENANCE),
            make_car("car-retired", CarStatus.RETIRED),
        ]
    )


@pytest.fixture
def operator_repo(assignment_repo, car_lookup) -> FakeOperatorRepo:
    return FakeOperatorRepo(
        [
            make_operator("op-a"),
            make_operator("op-b"),
            make_operator("op-gone", is_active=False),
        ],
        assignments=assignment_repo,
        cars=car_lookup,
    )


@pytest.fixture
def audit() -> FakeAuditSink:
    return FakeAuditSink()


@pytest.fixture
def engine(assignment_repo, car_lookup, operator_repo, audit, today) -> AssignmentEngine:
    return AssignmentEngine(
        assignment_repo=assignment_repo,
        car_lookup=car_lookup,
        operator_repo=operator_repo,
        audit=audit,
        today=lambda: today,
    )


@pytest.fixture
def operators_uc(operator_repo, engine, audit) -> ManageOperatorsUseCase:
    return ManageOperatorsUseCase(operator_repo=operator_repo, engine=engine, audit=audit)
