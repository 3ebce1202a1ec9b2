"""Port interface for the append-only audit log."""

from abc import ABC, abstractmethod

from autoparc.domain.entities.audit_entry import AuditEntry


class AuditSink(ABC):
    @abstractmethod
    async def record(self, entry: AuditEntry) -> None:
        """Write one entry. Callers treat this as best-effort."""
        ...
