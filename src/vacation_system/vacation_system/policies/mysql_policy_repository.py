from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import AccrualType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import VacationPolicy
from .repository import PolicyRepository

_COLUMNS = """
    policy_id, name, year, accrual_type, total_days_per_year, carry_over_max_days, created_at, updated_at
"""


def _to_policy(r: dict) -> VacationPolicy:
    return VacationPolicy(
        policy_id=int(r["policy_id"]),
        name=r["name"],
        year=int(r["year"]),
        accrual_type=AccrualType(r["accrual_type"]),
        total_days_per_year=as_decimal(r["total_days_per_year"]),
        carry_over_max_days=as_decimal(r["carry_over_max_days"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLPolicyRepository(PolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, policy_id: int) -> Optional[VacationPolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM vacation_policies WHERE policy_id=%s", (int(policy_id),))
            r = fetchone(cur)
            return _to_policy(r) if r else None

    def list_policies(self, *, year: Optional[int] = None) -> Sequence[VacationPolicy]:
        clauses = ["1=1"]
        params: list[object] = []
        if year is not None:
            clauses.append("year=%s")
            params.append(int(year))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM vacation_policies WHERE {where} ORDER BY year DESC, name ASC",
                tuple(params),
            )
            return [_to_policy(r) for r in fetchall(cur)]

    def default_for_year(self, year: int) -> Optional[VacationPolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM vacation_policies WHERE year=%s ORDER BY policy_id LIMIT 1",
                (int(year),),
            )
            r = fetchone(cur)
            return _to_policy(r) if r else None

    def name_taken(self, *, name: str, year: int, exclude_policy_id: Optional[int] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n
                FROM vacation_policies
                WHERE name=%s AND year=%s AND policy_id<>%s
                """,
                (name, int(year), int(exclude_policy_id or 0)),
            )
            r = fetchone(cur)
            return bool(r and int(r["n"]) > 0)

    def create(
        self,
        *,
        name: str,
        year: int,
        accrual_type: AccrualType,
        total_days_per_year: Decimal,
        carry_over_max_days: Decimal,
        now: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO vacation_policies(
                    name, year, accrual_type, total_days_per_year, carry_over_max_days, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, int(year), accrual_type.value, total_days_per_year, carry_over_max_days, now, now),
            )
            return int(cur.lastrowid)

    def update(self, policy: VacationPolicy) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE vacation_policies
                SET name=%s, year=%s, accrual_type=%s,
                    total_days_per_year=%s, carry_over_max_days=%s, updated_at=%s
                WHERE policy_id=%s
                """,
                (
                    policy.name,
                    int(policy.year),
                    policy.accrual_type.value,
                    policy.total_days_per_year,
                    policy.carry_over_max_days,
                    policy.updated_at,
                    int(policy.policy_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, policy_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM vacation_policies WHERE policy_id=%s", (int(policy_id),))
            return cur.rowcount > 0
