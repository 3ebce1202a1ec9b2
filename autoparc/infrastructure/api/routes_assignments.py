"""Assignment endpoints — assign / unassign operators, active and history views."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from autoparc.application.use_cases.assignment_engine import AssignmentEngine
from autoparc.domain.entities.assignment import AssignmentFilter
from autoparc.infrastructure.api.dependencies import get_actor_id, get_assignment_engine
from autoparc.infrastructure.api.schemas import (
    AssignOperatorRequest,
    UnassignOperatorRequest,
)
from autoparc.infrastructure.api.serializers import serialize_assignment

router = APIRouter(tags=["assignments"])


@router.post("/cars/{car_id}/assign", status_code=status.HTTP_201_CREATED)
async def assign_operator(
    car_id: str,
    body: AssignOperatorRequest,
    actor_id: str = Depends(get_actor_id),
    engine: AssignmentEngine = Depends(get_assignment_engine),
):
    """Assign an operator to a car from startDate on."""
    assignment = await engine.assign_to_car(
        car_id, body.operator_id, body.start_date, body.notes, actor_id
    )
    return serialize_assignment(assignment)


@router.post("/cars/{car_id}/unassign")
async def unassign_operator(
    car_id: str,
    body: UnassignOperatorRequest,
    actor_id: str = Depends(get_actor_id),
    engine: AssignmentEngine = Depends(get_assignment_engine),
):
    """End the car's current assignment on endDate."""
    await engine.unassign_from_car(car_id, body.end_date, body.notes, actor_id)
    return {"message": "Operator unassigned successfully"}


@router.get("/cars/{car_id}/assignment")
async def get_car_assignment(
    car_id: str, engine: AssignmentEngine = Depends(get_assignment_engine)
):
    """Current assignment of a car, or null."""
    return {"assignment": serialize_assignment(await engine.get_active_for_car(car_id))}


@router.get("/cars/{car_id}/assignment-history")
async def get_car_assignment_history(
    car_id: str, engine: AssignmentEngine = Depends(get_assignment_engine)
):
    history = await engine.get_car_history(car_id)
    return {"total": len(history), "assignments": [serialize_assignment(a) for a in history]}


@router.get("/assignments")
async def list_assignments(
    car_id: str | None = Query(default=None, alias="carId"),
    operator_id: str | None = Query(default=None, alias="operatorId"),
    active: bool | None = Query(default=None),
    start_from: date | None = Query(default=None, alias="startFrom"),
    end_until: date | None = Query(default=None, alias="endUntil"),
    engine: AssignmentEngine = Depends(get_assignment_engine),
):
    """Assignment history with optional filters, newest start date first."""
    history = await engine.get_history(
        AssignmentFilter(
            car_id=car_id,
            operator_id=operator_id,
            active=active,
            start_from=start_from,
            end_until=end_until,
        )
    )
    return {"total": len(history), "assignments": [serialize_assignment(a) for a in history]}
