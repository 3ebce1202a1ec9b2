"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from autoparc.adapters.persistence.audit_sink import SqlAuditSink
from autoparc.adapters.persistence.database import async_session_factory, get_session
from autoparc.adapters.persistence.repositories import (
    SqlAssignmentRepository,
    SqlCarLookup,
    SqlOperatorRepository,
)
from autoparc.application.use_cases.assignment_engine import AssignmentEngine
from autoparc.application.use_cases.manage_operators import ManageOperatorsUseCase
from autoparc.config import settings
from autoparc.domain.errors import ValidationError

# Re-export session dependency
get_db_session = get_session

# Audit entries are written through their own sessions, never the request's
_audit_sink = SqlAuditSink(async_session_factory)


def get_actor_id(x_actor_id: str | None = Header(default=None)) -> str:
    """The acting administrator, as forwarded by the authentication layer."""
    if x_actor_id is None or not x_actor_id.strip():
        raise ValidationError("X-Actor-Id header is required")
    return x_actor_id.strip()


def get_assignment_engine(
    session: AsyncSession = Depends(get_session),
) -> AssignmentEngine:
    return AssignmentEngine(
        assignment_repo=SqlAssignmentRepository(session),
        car_lookup=SqlCarLookup(session),
        operator_repo=SqlOperatorRepository(session),
        audit=_audit_sink,
        max_backdate_days=settings.assignment_backdate_days,
    )


def get_manage_operators_uc(
    session: AsyncSession = Depends(get_session),
    engine: AssignmentEngine = Depends(get_assignment_engine),
) -> ManageOperatorsUseCase:
    return ManageOperatorsUseCase(
        operator_repo=SqlOperatorRepository(session),
        engine=engine,
        audit=_audit_sink,
    )
