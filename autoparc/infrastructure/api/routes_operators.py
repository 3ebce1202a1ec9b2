"""Operator endpoints — CRUD with soft delete, plus assignment views."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from autoparc.application.use_cases.assignment_engine import AssignmentEngine
from autoparc.application.use_cases.manage_operators import (
    ManageOperatorsUseCase,
    NewOperator,
    OperatorChanges,
)
from autoparc.domain.entities.operator import OperatorFilter
from autoparc.infrastructure.api.dependencies import (
    get_actor_id,
    get_assignment_engine,
    get_manage_operators_uc,
)
from autoparc.infrastructure.api.schemas import (
    CreateOperatorRequest,
    UpdateOperatorRequest,
)
from autoparc.infrastructure.api.serializers import (
    serialize_assignment,
    serialize_operator,
    serialize_operator_detail,
    serialize_operator_page,
)

router = APIRouter(prefix="/operators", tags=["operators"])


# sortBy values accepted on the listing, mapped to operator fields
_SORT_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "employeeNumber": "employee_number",
    "department": "department",
    "createdAt": "created_at",
}


@router.get("")
async def list_operators(
    search: str | None = Query(default=None),
    department: str | None = Query(default=None),
    is_active: bool | None = Query(default=None, alias="isActive"),
    page: int = Query(default=1),
    limit: int = Query(default=20),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str = Query(default="asc", alias="sortOrder"),
    uc: ManageOperatorsUseCase = Depends(get_manage_operators_uc),
):
    """Operators with their current car; unknown sortBy keeps newest first."""
    result = await uc.list_operators(
        OperatorFilter(
            search=search,
            department=department,
            is_active=is_active,
            page=page,
            limit=limit,
            sort_by=_SORT_FIELDS.get(sort_by) if sort_by else None,
            sort_order=sort_order,
        )
    )
    return serialize_operator_page(result)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_operator(
    body: CreateOperatorRequest,
    actor_id: str = Depends(get_actor_id),
    uc: ManageOperatorsUseCase = Depends(get_manage_operators_uc),
):
    operator = await uc.create_operator(
        NewOperator(
            employee_number=body.employee_number,
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            phone=body.phone,
            department=body.department,
        ),
        actor_id,
    )
    return serialize_operator(operator)


@router.get("/{operator_id}")
async def get_operator(
    operator_id: str, uc: ManageOperatorsUseCase = Depends(get_manage_operators_uc)
):
    """Operator with current assignment and full assignment history."""
    return serialize_operator_detail(await uc.get_operator(operator_id))


@router.put("/{operator_id}")
async def update_operator(
    operator_id: str,
    body: UpdateOperatorRequest,
    actor_id: str = Depends(get_actor_id),
    uc: ManageOperatorsUseCase = Depends(get_manage_operators_uc),
):
    operator = await uc.update_operator(
        operator_id,
        OperatorChanges(
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            phone=body.phone,
            department=body.department,
            is_active=body.is_active,
        ),
        actor_id,
    )
    return serialize_operator(operator)


@router.delete("/{operator_id}")
async def delete_operator(
    operator_id: str,
    actor_id: str = Depends(get_actor_id),
    uc: ManageOperatorsUseCase = Depends(get_manage_operators_uc),
):
    """Soft delete; refused while the operator has an active assignment."""
    await uc.delete_operator(operator_id, actor_id)
    return {"message": "Operator deleted successfully"}


@router.get("/{operator_id}/assignment")
async def get_operator_assignment(
    operator_id: str, engine: AssignmentEngine = Depends(get_assignment_engine)
):
    assignment = await engine.get_active_for_operator(operator_id)
    return {"assignment": serialize_assignment(assignment)}


@router.get("/{operator_id}/assignment-history")
async def get_operator_assignment_history(
    operator_id: str, engine: AssignmentEngine = Depends(get_assignment_engine)
):
    history = await engine.get_operator_history(operator_id)
    return {"total": len(history), "assignments": [serialize_assignment(a) for a in history]}
