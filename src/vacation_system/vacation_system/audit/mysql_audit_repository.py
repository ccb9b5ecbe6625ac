from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional, Sequence

from ..core.enums import AuditAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AuditEntry
from .repository import AuditRepository


def _load(raw) -> Optional[dict[str, Any]]:
    if raw is None:
        return None
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    return json.loads(raw) if isinstance(raw, str) else raw


def _to_entry(r: dict) -> AuditEntry:
    return AuditEntry(
        audit_id=int(r["audit_id"]),
        entity_type=r["entity_type"],
        entity_id=r["entity_id"],
        action=AuditAction(r["action"]),
        old_values=_load(r.get("old_values")),
        new_values=_load(r.get("new_values")),
        performed_by=r.get("performed_by"),
        performed_at=r["performed_at"],
    )


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_log(
                    entity_type, entity_id, action, old_values, new_values, performed_by, performed_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entity_type,
                    str(entity_id),
                    action.value,
                    json.dumps(old_values) if old_values is not None else None,
                    json.dumps(new_values) if new_values is not None else None,
                    performed_by,
                    now,
                ),
            )
            return int(cur.lastrowid)

    def list_for_entity(self, entity_type: str, entity_id: str) -> Sequence[AuditEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT audit_id, entity_type, entity_id, action, old_values, new_values, performed_by, performed_at
                FROM audit_log
                WHERE entity_type=%s AND entity_id=%s
                ORDER BY performed_at, audit_id
                """,
                (entity_type, str(entity_id)),
            )
            return [_to_entry(r) for r in fetchall(cur)]
