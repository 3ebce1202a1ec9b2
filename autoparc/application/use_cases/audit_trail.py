"""Best-effort audit dispatch shared by the use cases."""

from __future__ import annotations

import logging

from autoparc.application.ports.audit_sink import AuditSink
from autoparc.domain.entities.audit_entry import AuditEntry

logger = logging.getLogger(__name__)


async def record_best_effort(sink: AuditSink, *entries: AuditEntry) -> None:
    """Write *entries* one by one, logging and swallowing any failure.

    Called only after the primary mutation has committed; audit is a side
    channel outside that transaction.
    """
    for entry in entries:
        try:
            await sink.record(entry)
        except Exception:
            logger.exception(
                "Audit write failed for %s %s (%s)",
                entry.entity_type.value, entry.entity_id, entry.action_type.value,
            )
