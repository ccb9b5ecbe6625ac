from __future__ import annotations

from datetime import date
from typing import Iterable, Protocol


class HolidayCalendar(Protocol):
    """Source of non-working dates (bank holidays, company closures)."""

    def holidays_between(self, start: date, end: date) -> set[date]:
        raise NotImplementedError


class StaticHolidayCalendar(HolidayCalendar):
    """Holiday calendar backed by a fixed set of dates (e.g. from settings)."""

    def __init__(self, holidays: Iterable[date] = ()):
        self._holidays = frozenset(holidays)

    def holidays_between(self, start: date, end: date) -> set[date]:
        return {d for d in self._holidays if start <= d <= end}
