from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeDirectory

_COLUMNS = "employee_id, employee_code, full_name, department, manager_employee_id, is_active"


def _to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        employee_code=row.get("employee_code") or "",
        full_name=row["full_name"],
        department=row.get("department"),
        manager_employee_id=row.get("manager_employee_id"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list_active(self, *, department: Optional[str] = None) -> Sequence[Employee]:
        clauses = ["is_active=1"]
        params: list[object] = []
        if department is not None:
            clauses.append("department=%s")
            params.append(department)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE {where} ORDER BY full_name, employee_id",
                tuple(params),
            )
            return [_to_employee(r) for r in fetchall(cur)]
