from datetime import date
from decimal import Decimal

import pytest

from src.vacation_system.vacation_system.core.exceptions import InvalidRange
from src.vacation_system.vacation_system.workdays.calculator import WeekendHolidayCalculator
from src.vacation_system.vacation_system.workdays.holiday_calendar import StaticHolidayCalendar


def _calc(*holidays):
    return WeekendHolidayCalculator(StaticHolidayCalendar(holidays))


def test_single_weekday_counts_one():
    assert _calc().working_days(date(2026, 4, 8), date(2026, 4, 8)) == Decimal("1")


@pytest.mark.parametrize("day", [date(2026, 4, 11), date(2026, 4, 12)])
def test_single_weekend_day_counts_zero(day):
    assert _calc().working_days(day, day) == 0


def test_full_week_counts_five_and_skips_holiday():
    calc = _calc(date(2026, 5, 1))

    assert calc.working_days(date(2026, 4, 20), date(2026, 4, 26)) == 5
    # Mon 27 Apr .. Fri 1 May, May 1st is a holiday
    assert calc.working_days(date(2026, 4, 27), date(2026, 5, 1)) == 4


def test_start_after_end_raises_invalid_range():
    with pytest.raises(InvalidRange):
        _calc().working_days(date(2026, 4, 10), date(2026, 4, 9))


def test_breakdown_flags_weekends_and_holidays_and_matches_count():
    calc = _calc(date(2026, 5, 1))
    days = calc.breakdown(date(2026, 4, 27), date(2026, 5, 3))

    assert [d.date for d in days][0] == date(2026, 4, 27)
    assert len(days) == 7
    assert [d.is_holiday_or_weekend for d in days] == [False, False, False, False, True, True, True]
    assert sum(d.counted_days for d in days) == calc.working_days(date(2026, 4, 27), date(2026, 5, 3))


def test_range_across_new_year():
    calc = _calc(date(2027, 1, 1))
    # Mon 28 Dec 2026 .. Mon 4 Jan 2027: 4 days in December, Jan 1st holiday, Jan 4th
    assert calc.working_days(date(2026, 12, 28), date(2027, 1, 4)) == 5
