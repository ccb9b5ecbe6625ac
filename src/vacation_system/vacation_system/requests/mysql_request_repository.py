from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import RequestStatus, VacationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, as_decimal, db_cursor, fetchall, fetchone
from .model import VacationRequest
from .repository import RequestRepository

_COLUMNS = """
    request_id, employee_id, start_date, end_date, requested_days, type, status,
    approver_employee_id, approver_comment, submitted_at, decision_at, created_at, updated_at
"""


def _to_request(r: dict) -> VacationRequest:
    return VacationRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        start_date=as_date(r["start_date"]),
        end_date=as_date(r["end_date"]),
        type=VacationType(r["type"]),
        requested_days=as_decimal(r["requested_days"]),
        status=RequestStatus(r["status"]),
        approver_employee_id=r.get("approver_employee_id"),
        approver_comment=r.get("approver_comment"),
        submitted_at=r.get("submitted_at"),
        decision_at=r.get("decision_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _in_clause(column: str, values: Sequence[object]) -> str:
    return f"{column} IN ({', '.join(['%s'] * len(values))})"


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        type: VacationType,
        requested_days: Decimal,
        now: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO vacation_requests(
                    employee_id, start_date, end_date, requested_days, type, status, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    start_date,
                    end_date,
                    requested_days,
                    type.value,
                    RequestStatus.DRAFT.value,
                    now,
                    now,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int) -> Optional[VacationRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM vacation_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_for_employee(
        self,
        employee_id: int,
        *,
        status: Optional[RequestStatus] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[VacationRequest]:
        clauses = ["employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM vacation_requests
                WHERE {where}
                ORDER BY start_date DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_by_status(
        self,
        status: RequestStatus,
        *,
        employee_ids: Optional[Iterable[int]] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[VacationRequest]:
        clauses = ["status=%s"]
        params: list[object] = [status.value]
        if employee_ids is not None:
            ids = [int(e) for e in employee_ids]
            if not ids:
                return []
            clauses.append(_in_clause("employee_id", ids))
            params.extend(ids)
        if date_from is not None:
            clauses.append("end_date >= %s")
            params.append(date_from)
        if date_to is not None:
            clauses.append("start_date <= %s")
            params.append(date_to)

        where = " AND ".join(clauses)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            # NULL submitted_at (drafts) sorts last.
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM vacation_requests
                WHERE {where}
                ORDER BY submitted_at IS NULL, submitted_at ASC, request_id ASC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def find_overlapping(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        *,
        statuses: Iterable[RequestStatus],
        exclude_request_id: Optional[int] = None,
    ) -> Sequence[VacationRequest]:
        status_values = [s.value for s in statuses]
        if not status_values:
            return []

        clauses = ["employee_id=%s", "start_date <= %s", "end_date >= %s", _in_clause("status", status_values)]
        params: list[object] = [int(employee_id), end_date, start_date, *status_values]
        if exclude_request_id is not None:
            clauses.append("request_id<>%s")
            params.append(int(exclude_request_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM vacation_requests WHERE {where} ORDER BY start_date",
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def sum_requested_days(self, employee_id: int, year: int, *, statuses: Iterable[RequestStatus]) -> Decimal:
        status_values = [s.value for s in statuses]
        if not status_values:
            return Decimal("0")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COALESCE(SUM(requested_days), 0) AS total
                FROM vacation_requests
                WHERE employee_id=%s AND YEAR(start_date)=%s AND {_in_clause("status", status_values)}
                """,
                (int(employee_id), int(year), *status_values),
            )
            r = fetchone(cur)
            return as_decimal(r["total"] if r else 0)

    def mark_submitted(self, request_id: int, *, requested_days: Decimal, now: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE vacation_requests
                SET status=%s, requested_days=%s, submitted_at=%s, updated_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    RequestStatus.SUBMITTED.value,
                    requested_days,
                    now,
                    now,
                    int(request_id),
                    RequestStatus.DRAFT.value,
                ),
            )
            return cur.rowcount > 0

    def record_decision(
        self,
        request_id: int,
        *,
        status: RequestStatus,
        approver_employee_id: Optional[int],
        comment: Optional[str],
        now: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE vacation_requests
                SET status=%s, approver_employee_id=%s, approver_comment=%s, decision_at=%s, updated_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    approver_employee_id,
                    comment,
                    now,
                    now,
                    int(request_id),
                    RequestStatus.SUBMITTED.value,
                ),
            )
            return cur.rowcount > 0

    def mark_cancelled(self, request_id: int, *, expected_status: RequestStatus, now: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE vacation_requests
                SET status=%s, updated_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (RequestStatus.CANCELLED.value, now, int(request_id), expected_status.value),
            )
            return cur.rowcount > 0
