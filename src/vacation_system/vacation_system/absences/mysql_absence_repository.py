from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import VacationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall
from .model import AbsenceDay
from .repository import AbsenceRepository


class MySQLAbsenceRepository(AbsenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def replace_for_request(
        self,
        request_id: int,
        *,
        employee_id: int,
        days: Iterable[date],
        absence_type: VacationType,
        now: datetime,
    ) -> int:
        rows = [(int(employee_id), d, absence_type.value, int(request_id), now) for d in days]
        # Delete and insert commit together.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM absence_calendar WHERE source_request_id=%s", (int(request_id),))
            if rows:
                cur.executemany(
                    """
                    INSERT INTO absence_calendar(employee_id, absence_date, absence_type, source_request_id, created_at)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    rows,
                )
        return len(rows)

    def list_for_employee(
        self,
        employee_id: int,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Sequence[AbsenceDay]:
        clauses = ["employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if date_from is not None:
            clauses.append("absence_date >= %s")
            params.append(date_from)
        if date_to is not None:
            clauses.append("absence_date <= %s")
            params.append(date_to)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT absence_id, employee_id, absence_date, absence_type, source_request_id
                FROM absence_calendar
                WHERE {' AND '.join(clauses)}
                ORDER BY absence_date, absence_id
                """,
                tuple(params),
            )
            return [
                AbsenceDay(
                    absence_id=int(r["absence_id"]),
                    employee_id=int(r["employee_id"]),
                    absence_date=as_date(r["absence_date"]),
                    absence_type=VacationType(r["absence_type"]),
                    source_request_id=int(r["source_request_id"]),
                )
                for r in fetchall(cur)
            ]
