"""Domain objects to API response dicts (camelCase keys)."""

from __future__ import annotations

from autoparc.application.use_cases.manage_operators import OperatorDetail
from autoparc.domain.entities.assignment import Assignment
from autoparc.domain.entities.operator import CurrentCar, Operator, OperatorPage


def serialize_assignment(a: Assignment | None) -> dict | None:
    if a is None:
        return None
    return {
        "id": a.id,
        "carId": a.car_id,
        "operatorId": a.operator_id,
        "startDate": a.start_date.isoformat(),
        "endDate": a.end_date.isoformat() if a.end_date else None,
        "notes": a.notes,
        "isActive": a.is_active(),
        "createdAt": a.created_at.isoformat() if a.created_at else None,
        "createdBy": a.created_by,
    }


def serialize_operator(o: Operator) -> dict:
    return {
        "id": o.id,
        "employeeNumber": o.employee_number,
        "firstName": o.first_name,
        "lastName": o.last_name,
        "email": o.email,
        "phone": o.phone,
        "department": o.department,
        "isActive": o.is_active,
        "createdAt": o.created_at.isoformat() if o.created_at else None,
        "updatedAt": o.updated_at.isoformat() if o.updated_at else None,
        "createdBy": o.created_by,
    }


def serialize_operator_detail(d: OperatorDetail) -> dict:
    data = serialize_operator(d.operator)
    data["currentAssignment"] = serialize_assignment(d.current_assignment)
    data["assignmentHistory"] = [serialize_assignment(a) for a in d.assignment_history]
    return data


def serialize_current_car(c: CurrentCar | None) -> dict | None:
    if c is None:
        return None
    return {
        "id": c.id,
        "licensePlate": c.license_plate,
        "brand": c.brand,
        "model": c.model,
        "since": c.since.isoformat() if c.since else None,
    }


def serialize_operator_page(p: OperatorPage) -> dict:
    return {
        "operators": [
            {**serialize_operator(i.operator), "currentCar": serialize_current_car(i.current_car)}
            for i in p.items
        ],
        "totalCount": p.total_count,
        "page": p.page,
        "limit": p.limit,
        "totalPages": p.total_pages,
    }
