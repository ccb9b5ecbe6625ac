from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.serialization import to_json
from ..core.enums import AuditAction
from .model import AuditEntry
from .repository import AuditRepository

logger = logging.getLogger(__name__)


class AuditTrail:
    """Append-only change log.

    Snapshots go through `to_json`, so dataclasses, Decimals and dates can be
    passed as they are.
    """

    def __init__(self, entries: AuditRepository, *, clock: Callable[[], datetime] = now_local):
        self._entries = entries
        self._clock = clock

    def record(
        self,
        entity_type: str,
        entity_id,
        action: AuditAction,
        *,
        performed_by: Optional[int] = None,
        old: Any = None,
        new: Any = None,
    ) -> int:
        audit_id = self._entries.record(
            entity_type=entity_type,
            entity_id=str(entity_id),
            action=action,
            old_values=to_json(old) if old is not None else None,
            new_values=to_json(new) if new is not None else None,
            performed_by=int(performed_by) if performed_by is not None else None,
            now=self._clock(),
        )
        logger.debug("audit %s %s/%s by %s", action.value, entity_type, entity_id, performed_by)
        return audit_id

    def history(self, entity_type: str, entity_id) -> Sequence[AuditEntry]:
        return self._entries.list_for_entity(entity_type, str(entity_id))
