"""AssignmentEngine — operator ↔ car assignment lifecycle."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import date, datetime, timezone

from autoparc.application.ports.assignment_repo import (
    ActiveAssignmentExists,
    AssignmentRepository,
)
from autoparc.application.ports.audit_sink import AuditSink
from autoparc.application.ports.car_lookup import CarLookup
from autoparc.application.ports.operator_repo import OperatorRepository
from autoparc.application.use_cases.audit_trail import record_best_effort
from autoparc.domain.entities.assignment import Assignment, AssignmentFilter
from autoparc.domain.entities.audit_entry import AuditEntry
from autoparc.domain.errors import (
    ConflictError,
    NoActiveAssignmentError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from autoparc.domain.policies.assignment_rules import (
    DEFAULT_BACKDATE_DAYS,
    check_end_date,
    check_start_date_window,
    parse_iso_date,
    require,
)
from autoparc.domain.value_objects.enums import ActionType, EntityType

logger = logging.getLogger(__name__)

OPERATOR_BUSY = "operator already has an active car assignment"
CAR_BUSY = "car already has an active operator assignment"


class AssignmentEngine:
    """Assigns operators to cars and keeps the assignment history.

    At most one open assignment per car and per operator. The repository's
    uniqueness guard is authoritative; the lookups done here only fail early
    with the same messages the guard produces.
    """

    def __init__(
        self,
        assignment_repo: AssignmentRepository,
        car_lookup: CarLookup,
        operator_repo: OperatorRepository,
        audit: AuditSink,
        max_backdate_days: int = DEFAULT_BACKDATE_DAYS,
        today: Callable[[], date] = date.today,
    ):
        self._assignments = assignment_repo
        self._cars = car_lookup
        self._operators = operator_repo
        self._audit = audit
        self._max_backdate_days = max_backdate_days
        self._today = today

    # ─── Mutations ──────────────────────────────────────────────────

    async def assign_to_car(
        self,
        car_id: str,
        operator_id: str,
        start_date: str,
        notes: str | None,
        actor_id: str,
    ) -> Assignment:
        """Open a new assignment of *operator_id* to *car_id*.

        Checks, in order:
        1. ids and start date present, start date is YYYY-MM-DD
        2. start date not further back than the backdate window
        3. car exists and is active
        4. operator exists and is active
        5. operator has no open assignment
        6. car has no open assignment

        Raises:
            ValidationError, PreconditionError, NotFoundError, ConflictError
        """
        car_id = require(car_id, "car ID")
        operator_id = require(operator_id, "operator ID")
        start = parse_iso_date(start_date, "start date")

        check_start_date_window(start, self._today(), self._max_backdate_days)

        car = await self._cars.get_by_id(car_id)
        if car is None:
            raise NotFoundError("car not found")
        if not car.is_assignable():
            raise PreconditionError("car must be active to assign an operator")

        operator = await self._operators.get_by_id(operator_id)
        if operator is None:
            raise NotFoundError("operator not found")
        if not operator.is_active:
            raise PreconditionError("operator must be active to be assigned")

        if await self._assignments.find_active_by_operator(operator_id) is not None:
            logger.warning("Assign rejected: operator %s is busy", operator_id)
            raise ConflictError(OPERATOR_BUSY)
        if await self._assignments.find_active_by_car(car_id) is not None:
            logger.warning("Assign rejected: car %s is busy", car_id)
            raise ConflictError(CAR_BUSY)

        assignment = Assignment(
            id=str(uuid.uuid4()),
            car_id=car_id,
            operator_id=operator_id,
            start_date=start,
            end_date=None,
            notes=notes,
            created_at=datetime.now(timezone.utc),
            created_by=actor_id,
        )
        try:
            await self._assignments.insert(assignment)
        except ActiveAssignmentExists as e:
            logger.warning(
                "Assign lost race on %s uniqueness (car=%s, operator=%s)",
                e.dimension, car_id, operator_id,
            )
            raise ConflictError(
                OPERATOR_BUSY if e.dimension == "operator" else CAR_BUSY
            ) from e
        await self._assignments.commit()

        logger.info(
            "Operator %s assigned to car %s from %s (assignment %s)",
            operator_id, car_id, start.isoformat(), assignment.id,
        )

        await record_best_effort(
            self._audit,
            AuditEntry(
                entity_type=EntityType.CAR,
                entity_id=car_id,
                action_type=ActionType.ASSIGN,
                performed_by=actor_id,
                changes={
                    "action": "assign_operator",
                    "operatorId": operator_id,
                    "startDate": start.isoformat(),
                },
            ),
            AuditEntry(
                entity_type=EntityType.OPERATOR,
                entity_id=operator_id,
                action_type=ActionType.ASSIGN,
                performed_by=actor_id,
                changes={
                    "action": "assign_to_car",
                    "carId": car_id,
                    "startDate": start.isoformat(),
                },
            ),
        )
        return assignment

    async def unassign_from_car(
        self,
        car_id: str,
        end_date: str,
        notes: str | None,
        actor_id: str,
    ) -> None:
        """Close the car's open assignment on *end_date*.

        Raises:
            ValidationError: blank car id, blank or malformed end date.
            NoActiveAssignmentError: nothing open for this car, or another
                caller closed it first.
            PreconditionError: end date before the assignment's start date.
        """
        car_id = require(car_id, "car ID")
        end = parse_iso_date(end_date, "end date")

        assignment = await self._assignments.find_active_by_car(car_id)
        if assignment is None:
            raise NoActiveAssignmentError()

        check_end_date(end, assignment.start_date)

        closed = await self._assignments.close_active(assignment.id, end, notes)
        if not closed:
            logger.warning(
                "Unassign of car %s found assignment %s already closed",
                car_id, assignment.id,
            )
            raise NoActiveAssignmentError()
        await self._assignments.commit()

        logger.info(
            "Operator %s unassigned from car %s on %s",
            assignment.operator_id, car_id, end.isoformat(),
        )

        await record_best_effort(
            self._audit,
            AuditEntry(
                entity_type=EntityType.CAR,
                entity_id=car_id,
                action_type=ActionType.UNASSIGN,
                performed_by=actor_id,
                changes={
                    "action": "unassign_operator",
                    "operatorId": assignment.operator_id,
                    "endDate": end.isoformat(),
                },
            ),
            AuditEntry(
                entity_type=EntityType.OPERATOR,
                entity_id=assignment.operator_id,
                action_type=ActionType.UNASSIGN,
                performed_by=actor_id,
                changes={
                    "action": "unassign_from_car",
                    "carId": car_id,
                    "endDate": end.isoformat(),
                },
            ),
        )

    # ─── Reads ──────────────────────────────────────────────────────

    async def get_active_for_car(self, car_id: str) -> Assignment | None:
        return await self._assignments.find_active_by_car(require(car_id, "car ID"))

    async def get_active_for_operator(self, operator_id: str) -> Assignment | None:
        return await self._assignments.find_active_by_operator(
            require(operator_id, "operator ID")
        )

    async def has_active_assignment(self, operator_id: str) -> bool:
        return await self.get_active_for_operator(operator_id) is not None

    async def get_history(self, filters: AssignmentFilter) -> list[Assignment]:
        if (
            filters.start_from is not None
            and filters.end_until is not None
            and filters.start_from > filters.end_until
        ):
            raise ValidationError("date range start must not be after its end")
        return await self._assignments.query_history(filters)

    async def get_car_history(self, car_id: str) -> list[Assignment]:
        return await self.get_history(AssignmentFilter(car_id=require(car_id, "car ID")))

    async def get_operator_history(self, operator_id: str) -> list[Assignment]:
        return await self.get_history(
            AssignmentFilter(operator_id=require(operator_id, "operator ID"))
        )

