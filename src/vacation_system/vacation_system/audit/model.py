from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import AuditAction


@dataclass(frozen=True)
class AuditEntry:
    """One change to a policy, balance or request, with JSON snapshots."""

    audit_id: int
    entity_type: str
    entity_id: str
    action: AuditAction
    old_values: Optional[dict[str, Any]]
    new_values: Optional[dict[str, Any]]
    performed_by: Optional[int]
    performed_at: datetime
