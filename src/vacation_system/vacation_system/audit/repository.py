from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from ..core.enums import AuditAction
from .model import AuditEntry


class AuditRepository(Protocol):
    def record(
        self,
        *,
        entity_type: str,
        entity_id: str,
        action: AuditAction,
        old_values: Optional[dict[str, Any]],
        new_values: Optional[dict[str, Any]],
        performed_by: Optional[int],
        now: datetime,
    ) -> int:
        raise NotImplementedError

    def list_for_entity(self, entity_type: str, entity_id: str) -> Sequence[AuditEntry]:
        """Oldest first."""
        raise NotImplementedError
