"""ManageOperatorsUseCase — create, inspect, update and retire operators."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from autoparc.application.ports.audit_sink import AuditSink
from autoparc.application.ports.operator_repo import (
    DuplicateEmployeeNumber,
    OperatorRepository,
)
from autoparc.application.use_cases.assignment_engine import AssignmentEngine
from autoparc.application.use_cases.audit_trail import record_best_effort
from autoparc.domain.entities.assignment import Assignment
from autoparc.domain.entities.audit_entry import AuditEntry
from autoparc.domain.entities.operator import (
    OPERATOR_SORT_FIELDS,
    Operator,
    OperatorFilter,
    OperatorPage,
)
from autoparc.domain.errors import (
    ConflictError,
    NotFoundError,
    OperatorHasActiveAssignmentError,
    ValidationError,
)
from autoparc.domain.policies.assignment_rules import is_blank, is_valid_email, require
from autoparc.domain.value_objects.enums import ActionType, EntityType

logger = logging.getLogger(__name__)

DUPLICATE_EMPLOYEE_NUMBER = "employee number already exists"
DEACTIVATE_BUSY_OPERATOR = "cannot deactivate operator with active car assignment"

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


@dataclass
class NewOperator:
    employee_number: str
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    department: str | None = None


@dataclass
class OperatorChanges:
    """Partial update; None means "leave as is"."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    department: str | None = None
    is_active: bool | None = None


@dataclass
class OperatorDetail:
    operator: Operator
    current_assignment: Assignment | None
    assignment_history: list[Assignment] = field(default_factory=list)


def _blank_to_none(value: str | None) -> str | None:
    return None if is_blank(value) else value.strip()


def _snapshot(operator: Operator) -> dict:
    return {
        "id": operator.id,
        "employeeNumber": operator.employee_number,
        "firstName": operator.first_name,
        "lastName": operator.last_name,
        "email": operator.email,
        "phone": operator.phone,
        "department": operator.department,
        "isActive": operator.is_active,
    }


class ManageOperatorsUseCase:
    """Operator bookkeeping around the assignment engine."""

    def __init__(
        self,
        operator_repo: OperatorRepository,
        engine: AssignmentEngine,
        audit: AuditSink,
    ):
        self._operators = operator_repo
        self._engine = engine
        self._audit = audit

    async def create_operator(self, data: NewOperator, actor_id: str) -> Operator:
        employee_number = require(data.employee_number, "employee number")
        first_name = require(data.first_name, "first name")
        last_name = require(data.last_name, "last name")
        email = _blank_to_none(data.email)
        if email is not None and not is_valid_email(email):
            raise ValidationError("invalid email format")

        if await self._operators.get_by_employee_number(employee_number) is not None:
            raise ConflictError(DUPLICATE_EMPLOYEE_NUMBER)

        now = datetime.now(timezone.utc)
        operator = Operator(
            id=str(uuid.uuid4()),
            employee_number=employee_number,
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=_blank_to_none(data.phone),
            department=_blank_to_none(data.department),
            is_active=True,
            created_at=now,
            updated_at=now,
            created_by=actor_id,
        )
        try:
            await self._operators.save(operator)
        except DuplicateEmployeeNumber as e:
            raise ConflictError(DUPLICATE_EMPLOYEE_NUMBER) from e
        await self._operators.commit()

        logger.info("Operator %s created (%s)", operator.id, employee_number)
        await record_best_effort(
            self._audit,
            AuditEntry(
                entity_type=EntityType.OPERATOR,
                entity_id=operator.id,
                action_type=ActionType.CREATE,
                performed_by=actor_id,
                changes=_snapshot(operator),
            ),
        )
        return operator

    async def get_operator(self, operator_id: str) -> OperatorDetail:
        operator = await self._require_operator(operator_id)
        return OperatorDetail(
            operator=operator,
            current_assignment=await self._engine.get_active_for_operator(operator.id),
            assignment_history=await self._engine.get_operator_history(operator.id),
        )

    async def list_operators(self, filters: OperatorFilter) -> OperatorPage:
        filters = replace(
            filters,
            page=max(filters.page, 1),
            limit=filters.limit if 1 <= filters.limit <= MAX_PAGE_SIZE else DEFAULT_PAGE_SIZE,
            sort_by=filters.sort_by if filters.sort_by in OPERATOR_SORT_FIELDS else None,
            sort_order="desc" if (filters.sort_order or "").lower() == "desc" else "asc",
        )

        items, total = await self._operators.find_all(filters)
        return OperatorPage(
            items=items, total_count=total, page=filters.page, limit=filters.limit
        )

    async def update_operator(
        self, operator_id: str, changes: OperatorChanges, actor_id: str
    ) -> Operator:
        """Apply the fields of *changes* that differ from the stored operator.

        Returns the operator unchanged (and writes nothing) when nothing differs.
        Deactivating an operator who still drives a car raises
        OperatorHasActiveAssignmentError.
        """
        existing = await self._require_operator(operator_id)

        values: dict = {}
        diff: dict = {}

        for attr, key, label in (
            ("first_name", "firstName", "first name"),
            ("last_name", "lastName", "last name"),
        ):
            new = getattr(changes, attr)
            if new is None or new == getattr(existing, attr):
                continue
            if is_blank(new):
                raise ValidationError(f"{label} cannot be empty")
            values[attr] = new.strip()
            diff[key] = {"old": getattr(existing, attr), "new": new.strip()}

        if changes.email is not None:
            email = _blank_to_none(changes.email)
            if email is not None and not is_valid_email(email):
                raise ValidationError("invalid email format")
            if email != existing.email:
                values["email"] = email
                diff["email"] = {"old": existing.email, "new": email}

        for attr in ("phone", "department"):
            new = getattr(changes, attr)
            if new is None:
                continue
            new = _blank_to_none(new)
            if new != getattr(existing, attr):
                values[attr] = new
                diff[attr] = {"old": getattr(existing, attr), "new": new}

        if changes.is_active is not None and changes.is_active != existing.is_active:
            # deactivating is a soft delete and carries the same guard
            if not changes.is_active and await self._engine.has_active_assignment(existing.id):
                raise OperatorHasActiveAssignmentError(DEACTIVATE_BUSY_OPERATOR)
            values["is_active"] = changes.is_active
            diff["isActive"] = {"old": existing.is_active, "new": changes.is_active}

        if not values:
            return existing

        await self._operators.update(existing.id, values)
        await self._operators.commit()

        logger.info("Operator %s updated: %s", existing.id, ", ".join(sorted(diff)))
        await record_best_effort(
            self._audit,
            AuditEntry(
                entity_type=EntityType.OPERATOR,
                entity_id=existing.id,
                action_type=ActionType.UPDATE,
                performed_by=actor_id,
                changes=diff,
            ),
        )
        return await self._require_operator(existing.id)

    async def delete_operator(self, operator_id: str, actor_id: str) -> None:
        """Soft-delete an operator; refused while it drives a car."""
        operator = await self._require_operator(operator_id)

        if await self._engine.has_active_assignment(operator.id):
            raise OperatorHasActiveAssignmentError()

        await self._operators.soft_delete(operator.id)
        await self._operators.commit()

        logger.info("Operator %s deactivated", operator.id)
        await record_best_effort(
            self._audit,
            AuditEntry(
                entity_type=EntityType.OPERATOR,
                entity_id=operator.id,
                action_type=ActionType.DELETE,
                performed_by=actor_id,
                changes={"isActive": {"old": operator.is_active, "new": False}},
            ),
        )

    async def _require_operator(self, operator_id: str) -> Operator:
        operator = await self._operators.get_by_id(require(operator_id, "operator ID"))
        if operator is None:
            raise NotFoundError("operator not found")
        return operator
