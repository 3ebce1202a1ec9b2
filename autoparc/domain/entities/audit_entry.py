"""AuditEntry — one append-only record of who changed what."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from autoparc.domain.value_objects.enums import ActionType, EntityType


@dataclass
class AuditEntry:
    entity_type: EntityType
    entity_id: str
    action_type: ActionType
    performed_by: str
    changes: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
