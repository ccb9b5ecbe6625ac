from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import VacationBalance
from .repository import BalanceRepository

_COLUMNS = "balance_id, employee_id, policy_id, year, allocated_days, used_days, updated_at"


def _to_balance(r: dict) -> VacationBalance:
    return VacationBalance(
        balance_id=int(r["balance_id"]),
        employee_id=int(r["employee_id"]),
        policy_id=int(r["policy_id"]),
        year=int(r["year"]),
        allocated_days=as_decimal(r["allocated_days"]),
        used_days=as_decimal(r["used_days"]),
        updated_at=r.get("updated_at"),
    )


class MySQLBalanceRepository(BalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_id: int, year: int) -> Optional[VacationBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employee_vacation_balances WHERE employee_id=%s AND year=%s",
                (int(employee_id), int(year)),
            )
            r = fetchone(cur)
            return _to_balance(r) if r else None

    def list_for_year(self, year: int, *, employee_ids: Optional[Iterable[int]] = None) -> Sequence[VacationBalance]:
        clauses = ["year=%s"]
        params: list[object] = [int(year)]
        if employee_ids is not None:
            ids = [int(e) for e in employee_ids]
            if not ids:
                return []
            clauses.append(f"employee_id IN ({', '.join(['%s'] * len(ids))})")
            params.extend(ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employee_vacation_balances WHERE {where} ORDER BY employee_id",
                tuple(params),
            )
            return [_to_balance(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        employee_id: int,
        policy_id: int,
        year: int,
        allocated_days: Decimal,
        now: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # The unique (employee_id, year) key turns a concurrent duplicate into a no-op.
            cur.execute(
                """
                INSERT IGNORE INTO employee_vacation_balances(
                    employee_id, policy_id, year, allocated_days, used_days, updated_at
                )
                VALUES(%s,%s,%s,%s,0,%s)
                """,
                (int(employee_id), int(policy_id), int(year), allocated_days, now),
            )
            return cur.rowcount > 0

    def add_used(self, *, employee_id: int, year: int, days: Decimal, now: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employee_vacation_balances
                SET used_days = used_days + %s, updated_at=%s
                WHERE employee_id=%s AND year=%s AND used_days + %s <= allocated_days
                """,
                (days, now, int(employee_id), int(year), days),
            )
            return cur.rowcount > 0

    def subtract_used(self, *, employee_id: int, year: int, days: Decimal, now: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employee_vacation_balances
                SET used_days = GREATEST(used_days - %s, 0), updated_at=%s
                WHERE employee_id=%s AND year=%s
                """,
                (days, now, int(employee_id), int(year)),
            )
            return cur.rowcount > 0

    def set_used(self, *, employee_id: int, year: int, used_days: Decimal, now: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employee_vacation_balances
                SET used_days=%s, updated_at=%s
                WHERE employee_id=%s AND year=%s AND %s BETWEEN 0 AND allocated_days
                """,
                (used_days, now, int(employee_id), int(year), used_days),
            )
            return cur.rowcount > 0

    def count_by_policy(self, policy_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM employee_vacation_balances WHERE policy_id=%s",
                (int(policy_id),),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0
