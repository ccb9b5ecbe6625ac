from datetime import date
from decimal import Decimal

from src.vacation_system.vacation_system.core.constants import (
    ERR_INSUFFICIENT_BALANCE,
    ERR_INVALID_RANGE,
    ERR_NO_WORKING_DAYS,
    ERR_OVERLAPPING,
    WARN_LONG_ABSENCE,
    WARN_SPANS_YEARS,
    WARN_START_PASSED,
)


def test_insufficient_balance_reports_working_days(container, balances):
    balances.put(employee_id=3, year=2026, allocated="22", used="19")

    result = container.request_validator.validate(3, date(2026, 4, 6), date(2026, 4, 10))

    assert result.is_valid is False
    assert result.working_days == Decimal("5")
    assert result.available_days == Decimal("3")
    assert ERR_INSUFFICIENT_BALANCE in result.errors


def test_invalid_range_stops_evaluation(container):
    result = container.request_validator.validate(3, date(2026, 4, 10), date(2026, 4, 6))

    assert result.is_valid is False
    assert result.errors == (ERR_INVALID_RANGE,)
    assert result.warnings == ()


def test_weekend_only_range_has_no_working_days(container, balances):
    balances.put(employee_id=3, year=2026, allocated="22")

    result = container.request_validator.validate(3, date(2026, 4, 11), date(2026, 4, 12))

    assert result.errors == (ERR_NO_WORKING_DAYS,)


def test_overlap_with_submitted_request_blocks(container, balances):
    balances.put(employee_id=3, year=2026, allocated="22")
    service = container.request_service
    req = service.create(employee_id=3, start_date=date(2026, 4, 6), end_date=date(2026, 4, 10))

    # A draft does not block
    assert container.request_validator.validate(3, date(2026, 4, 9), date(2026, 4, 14)).is_valid

    service.submit(req.request_id)
    result = container.request_validator.validate(3, date(2026, 4, 9), date(2026, 4, 14))
    assert result.errors == (ERR_OVERLAPPING,)
    # Other employees are not affected
    balances.put(employee_id=4, year=2026, allocated="22")
    assert container.request_validator.validate(4, date(2026, 4, 9), date(2026, 4, 14)).is_valid


def test_warnings_do_not_block(container, balances):
    balances.put(employee_id=3, year=2026, allocated="40")

    past = container.request_validator.validate(3, date(2026, 2, 23), date(2026, 2, 24))
    assert past.is_valid and past.warnings == (WARN_START_PASSED,)

    spanning = container.request_validator.validate(3, date(2026, 12, 28), date(2027, 1, 4))
    assert spanning.is_valid and WARN_SPANS_YEARS in spanning.warnings
    assert spanning.working_days == Decimal("5")

    long = container.request_validator.validate(3, date(2026, 7, 1), date(2026, 7, 31))
    assert long.is_valid and long.warnings == (WARN_LONG_ABSENCE,)


def test_available_days_fall_back_to_prospective_allocation(container, standard_policy):
    result = container.request_validator.validate(3, date(2026, 4, 6), date(2026, 4, 10))

    assert result.is_valid
    assert result.available_days == Decimal("22")


def test_available_days_zero_without_policy(container):
    result = container.request_validator.validate(3, date(2026, 4, 6), date(2026, 4, 10))

    assert result.available_days == Decimal("0")
    assert result.errors == (ERR_INSUFFICIENT_BALANCE,)
