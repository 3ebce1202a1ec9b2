"""SQL audit sink — appends action_logs rows in a session of its own."""

from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from autoparc.adapters.persistence.models import ActionLogModel
from autoparc.application.ports.audit_sink import AuditSink
from autoparc.domain.entities.audit_entry import AuditEntry


class SqlAuditSink(AuditSink):
    """Each entry commits independently of the request's unit of work."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def record(self, entry: AuditEntry) -> None:
        async with self._session_factory() as session:
            session.add(
                ActionLogModel(
                    id=str(uuid.uuid4()),
                    entity_type=entry.entity_type.value,
                    entity_id=entry.entity_id,
                    action_type=entry.action_type.value,
                    performed_by=entry.performed_by,
                    changes=entry.changes,
                    timestamp=entry.timestamp,
                )
            )
            await session.commit()
