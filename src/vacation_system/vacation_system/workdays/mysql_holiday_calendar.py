from __future__ import annotations

from datetime import date

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall
from .holiday_calendar import HolidayCalendar


class MySQLHolidayCalendar(HolidayCalendar):
    """Holidays from the `calendar_days` table.

    Weekend flags in that table are ignored; weekends are a calculator rule.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def holidays_between(self, start: date, end: date) -> set[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT calendar_date
                FROM calendar_days
                WHERE is_holiday=1 AND calendar_date BETWEEN %s AND %s
                """,
                (start, end),
            )
            return {as_date(r["calendar_date"]) for r in fetchall(cur)}
