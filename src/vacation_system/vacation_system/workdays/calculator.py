from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal

from ..common.datetime_utils import iter_days
from ..core.exceptions import InvalidRange
from .holiday_calendar import HolidayCalendar, StaticHolidayCalendar
from .model import RequestDay

_SATURDAY = 5


class WorkingDayCalculator(ABC):
    """Calculator interface (Strategy Pattern for day counting)."""

    @abstractmethod
    def breakdown(self, start: date, end: date) -> list[RequestDay]:
        raise NotImplementedError

    def working_days(self, start: date, end: date) -> Decimal:
        """Number of working days in [start, end].

        Returned as Decimal so half days can be represented later.
        """
        return sum((d.counted_days for d in self.breakdown(start, end)), Decimal("0"))


class WeekendHolidayCalculator(WorkingDayCalculator):
    """Standard rule: Monday to Friday, minus the injected holidays."""

    def __init__(self, holidays: HolidayCalendar | None = None):
        self._holidays = holidays or StaticHolidayCalendar()

    def breakdown(self, start: date, end: date) -> list[RequestDay]:
        if start > end:
            raise InvalidRange(start, end)

        holidays = self._holidays.holidays_between(start, end)
        return [
            RequestDay(date=d, is_holiday_or_weekend=d.weekday() >= _SATURDAY or d in holidays)
            for d in iter_days(start, end)
        ]
