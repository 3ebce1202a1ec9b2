"""SQLAlchemy repository implementations."""

from __future__ import annotations

from datetime import date

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from autoparc.adapters.persistence.models import (
    ACTIVE_CAR_INDEX,
    ACTIVE_OPERATOR_INDEX,
    EMPLOYEE_NUMBER_CONSTRAINT,
    AssignmentModel,
    CarModel,
    OperatorModel,
)
from autoparc.application.ports.assignment_repo import (
    ActiveAssignmentExists,
    AssignmentRepository,
)
from autoparc.application.ports.car_lookup import CarLookup
from autoparc.application.ports.operator_repo import (
    DuplicateEmployeeNumber,
    OperatorRepository,
)
from autoparc.domain.entities.assignment import Assignment, AssignmentFilter
from autoparc.domain.entities.car import Car
from autoparc.domain.entities.operator import (
    OPERATOR_SORT_FIELDS,
    CurrentCar,
    Operator,
    OperatorFilter,
    OperatorListItem,
)
from autoparc.domain.value_objects.enums import CarStatus

# ─── Mappers ─────────────────────────────────────────────────────────


def _car_to_domain(m: CarModel) -> Car:
    return Car(
        id=m.id,
        license_plate=m.license_plate,
        status=CarStatus(m.status),
        brand=m.brand,
        model=m.model,
    )


def _operator_to_domain(m: OperatorModel) -> Operator:
    return Operator(
        id=m.id,
        employee_number=m.employee_number,
        first_name=m.first_name,
        last_name=m.last_name,
        email=m.email,
        phone=m.phone,
        department=m.department,
        is_active=m.is_active,
        created_at=m.created_at,
        updated_at=m.updated_at,
        created_by=m.created_by,
    )


def _current_car(m: CarModel, since: date | None) -> CurrentCar:
    return CurrentCar(
        id=m.id, license_plate=m.license_plate, brand=m.brand, model=m.model, since=since
    )


def _assignment_to_domain(m: AssignmentModel) -> Assignment:
    return Assignment(
        id=m.id,
        car_id=m.car_id,
        operator_id=m.operator_id,
        start_date=m.start_date,
        end_date=m.end_date,
        notes=m.notes,
        created_at=m.created_at,
        created_by=m.created_by,
    )


# ─── Constraint translation ──────────────────────────────────────────


# SQLite names the columns rather than the index: "UNIQUE constraint failed: t.col"
_UNIQUE_COLUMNS = {
    "car_operator_assignments.car_id": ACTIVE_CAR_INDEX,
    "car_operator_assignments.operator_id": ACTIVE_OPERATOR_INDEX,
    "car_operators.employee_number": EMPLOYEE_NUMBER_CONSTRAINT,
}


def violated_constraint(exc: IntegrityError) -> str | None:
    """Best-effort name of the constraint behind an IntegrityError.

    asyncpg exposes it as ``constraint_name`` on the driver error (wrapped
    by SQLAlchemy's adapter as ``__cause__``); psycopg2 as ``diag.constraint_name``.
    Falls back to searching the message for one of our known names, or for
    the column a SQLite unique failure reports.
    """
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        name = getattr(candidate, "constraint_name", None)
        if name:
            return name
        diag = getattr(candidate, "diag", None)
        name = getattr(diag, "constraint_name", None) if diag is not None else None
        if name:
            return name

    message = str(orig)
    for known in (ACTIVE_CAR_INDEX, ACTIVE_OPERATOR_INDEX, EMPLOYEE_NUMBER_CONSTRAINT):
        if known in message:
            return known
    if "UNIQUE constraint failed" in message:
        for column, known in _UNIQUE_COLUMNS.items():
            if column in message:
                return known
    return None


def active_conflict_dimension(exc: IntegrityError) -> str | None:
    """Map a uniqueness violation on open assignments to "car" / "operator"."""
    name = violated_constraint(exc)
    if name == ACTIVE_CAR_INDEX:
        return "car"
    if name == ACTIVE_OPERATOR_INDEX:
        return "operator"
    return None


# ─── Repositories ────────────────────────────────────────────────────


class SqlCarLookup(CarLookup):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_by_id(self, car_id: str) -> Car | None:
        m = await self._s.get(CarModel, car_id)
        return _car_to_domain(m) if m else None


class SqlOperatorRepository(OperatorRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, operator: Operator) -> Operator:
        m = OperatorModel(
            id=operator.id,
            employee_number=operator.employee_number,
            first_name=operator.first_name,
            last_name=operator.last_name,
            email=operator.email,
            phone=operator.phone,
            department=operator.department,
            is_active=operator.is_active,
            created_at=operator.created_at,
            updated_at=operator.updated_at,
            created_by=operator.created_by,
        )
        try:
            async with self._s.begin_nested():
                self._s.add(m)
        except IntegrityError as e:
            if violated_constraint(e) == EMPLOYEE_NUMBER_CONSTRAINT:
                raise DuplicateEmployeeNumber(operator.employee_number) from e
            raise
        return operator

    async def get_by_id(self, operator_id: str) -> Operator | None:
        m = await self._s.get(OperatorModel, operator_id, populate_existing=True)
        return _operator_to_domain(m) if m else None

    async def get_by_employee_number(self, employee_number: str) -> Operator | None:
        result = await self._s.execute(
            select(OperatorModel).where(OperatorModel.employee_number == employee_number)
        )
        m = result.scalar_one_or_none()
        return _operator_to_domain(m) if m else None

    async def find_all(
        self, filters: OperatorFilter
    ) -> tuple[list[OperatorListItem], int]:
        stmt = select(OperatorModel)
        if filters.is_active is not None:
            stmt = stmt.where(OperatorModel.is_active == filters.is_active)
        if filters.department:
            stmt = stmt.where(OperatorModel.department == filters.department)
        if filters.search:
            pattern = f"%{filters.search}%"
            stmt = stmt.where(
                or_(
                    OperatorModel.first_name.ilike(pattern),
                    OperatorModel.last_name.ilike(pattern),
                    OperatorModel.employee_number.ilike(pattern),
                    OperatorModel.email.ilike(pattern),
                )
            )

        total = (
            await self._s.execute(select(func.count()).select_from(stmt.subquery()))
        ).scalar() or 0

        if filters.sort_by in OPERATOR_SORT_FIELDS:
            column = getattr(OperatorModel, filters.sort_by)
            order = column.desc() if filters.sort_order == "desc" else column.asc()
        else:
            order = OperatorModel.created_at.desc()

        # open assignment (at most one per operator) and its car
        page = (
            stmt.add_columns(CarModel, AssignmentModel.start_date)
            .outerjoin(
                AssignmentModel,
                and_(
                    AssignmentModel.operator_id == OperatorModel.id,
                    AssignmentModel.end_date.is_(None),
                ),
            )
            .outerjoin(CarModel, CarModel.id == AssignmentModel.car_id)
            .order_by(order, OperatorModel.id)
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
            .execution_options(populate_existing=True)
        )
        result = await self._s.execute(page)
        return [
            OperatorListItem(
                operator=_operator_to_domain(operator),
                current_car=_current_car(car, since) if car is not None else None,
            )
            for operator, car, since in result.all()
        ], total

    async def update(self, operator_id: str, values: dict) -> None:
        await self._s.execute(
            update(OperatorModel)
            .where(OperatorModel.id == operator_id)
            .values(**values, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        await self._s.flush()

    async def soft_delete(self, operator_id: str) -> None:
        await self.update(operator_id, {"is_active": False})

    async def commit(self) -> None:
        await self._s.commit()


class SqlAssignmentRepository(AssignmentRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def insert(self, assignment: Assignment) -> Assignment:
        m = AssignmentModel(
            id=assignment.id,
            car_id=assignment.car_id,
            operator_id=assignment.operator_id,
            start_date=assignment.start_date,
            end_date=None,
            notes=assignment.notes,
            created_at=assignment.created_at,
            created_by=assignment.created_by,
        )
        # SAVEPOINT keeps the outer transaction usable if the index rejects us
        try:
            async with self._s.begin_nested():
                self._s.add(m)
        except IntegrityError as e:
            dimension = active_conflict_dimension(e)
            if dimension is None:
                raise
            raise ActiveAssignmentExists(dimension) from e
        return assignment

    async def find_active_by_car(self, car_id: str) -> Assignment | None:
        result = await self._s.execute(
            select(AssignmentModel).where(
                AssignmentModel.car_id == car_id,
                AssignmentModel.end_date.is_(None),
            )
        )
        m = result.scalar_one_or_none()
        return _assignment_to_domain(m) if m else None

    async def find_active_by_operator(self, operator_id: str) -> Assignment | None:
        result = await self._s.execute(
            select(AssignmentModel).where(
                AssignmentModel.operator_id == operator_id,
                AssignmentModel.end_date.is_(None),
            )
        )
        m = result.scalar_one_or_none()
        return _assignment_to_domain(m) if m else None

    async def close_active(
        self, assignment_id: str, end_date: date, notes: str | None
    ) -> bool:
        values: dict = {"end_date": end_date}
        if notes is not None:
            values["notes"] = notes
        result = await self._s.execute(
            update(AssignmentModel)
            .where(
                AssignmentModel.id == assignment_id,
                AssignmentModel.end_date.is_(None),
            )
            .values(**values)
        )
        return result.rowcount == 1

    async def query_history(self, filters: AssignmentFilter) -> list[Assignment]:
        stmt = select(AssignmentModel)
        if filters.car_id is not None:
            stmt = stmt.where(AssignmentModel.car_id == filters.car_id)
        if filters.operator_id is not None:
            stmt = stmt.where(AssignmentModel.operator_id == filters.operator_id)
        if filters.active is True:
            stmt = stmt.where(AssignmentModel.end_date.is_(None))
        elif filters.active is False:
            stmt = stmt.where(AssignmentModel.end_date.is_not(None))
        if filters.start_from is not None:
            stmt = stmt.where(AssignmentModel.start_date >= filters.start_from)
        if filters.end_until is not None:
            stmt = stmt.where(
                or_(
                    AssignmentModel.end_date.is_(None),
                    AssignmentModel.end_date <= filters.end_until,
                )
            )

        result = await self._s.execute(
            stmt.order_by(
                AssignmentModel.start_date.desc(), AssignmentModel.created_at.desc()
            )
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    async def commit(self) -> None:
        await self._s.commit()
