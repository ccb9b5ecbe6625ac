from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

from ..balances.service import BalanceLedger
from ..common.datetime_utils import now_local
from ..core.constants import (
    ERR_INSUFFICIENT_BALANCE,
    ERR_INVALID_RANGE,
    ERR_NO_WORKING_DAYS,
    ERR_OVERLAPPING,
    LONG_ABSENCE_WORKING_DAYS,
    WARN_LONG_ABSENCE,
    WARN_SPANS_YEARS,
    WARN_START_PASSED,
)
from ..core.enums import RESERVING_STATUSES
from ..workdays.calculator import WorkingDayCalculator
from .model import ValidationResult
from .repository import RequestRepository


class RequestValidator:
    """Read-only checks for a requested date range.

    Errors block creation and submission; warnings are returned for display.
    Nothing is written, so the same call serves the preview endpoint and the
    create/submit paths.
    """

    def __init__(
        self,
        *,
        requests: RequestRepository,
        ledger: BalanceLedger,
        calculator: WorkingDayCalculator,
        clock: Callable[[], datetime] = now_local,
    ):
        self._requests = requests
        self._ledger = ledger
        self._calculator = calculator
        self._clock = clock

    def available_days(self, employee_id: int, year: int) -> Decimal:
        balance = self._ledger.find_balance(employee_id, year)
        if balance:
            return balance.remaining_days
        prospective = self._ledger.preview_allocation(employee_id, year)
        return prospective if prospective is not None else Decimal("0")

    def validate(
        self,
        employee_id: int,
        start: date,
        end: date,
        *,
        exclude_request_id: Optional[int] = None,
    ) -> ValidationResult:
        if start > end:
            return ValidationResult(
                is_valid=False,
                working_days=Decimal("0"),
                available_days=Decimal("0"),
                errors=(ERR_INVALID_RANGE,),
            )

        errors: list[str] = []
        warnings: list[str] = []

        overlapping = self._requests.find_overlapping(
            int(employee_id),
            start,
            end,
            statuses=RESERVING_STATUSES,
            exclude_request_id=exclude_request_id,
        )
        if overlapping:
            errors.append(ERR_OVERLAPPING)

        working_days = self._calculator.working_days(start, end)
        if working_days == 0:
            errors.append(ERR_NO_WORKING_DAYS)

        available = self.available_days(employee_id, start.year)
        if working_days > available:
            errors.append(ERR_INSUFFICIENT_BALANCE)

        if start.year != end.year:
            warnings.append(WARN_SPANS_YEARS)
        if start < self._clock().date():
            warnings.append(WARN_START_PASSED)
        if working_days > LONG_ABSENCE_WORKING_DAYS:
            warnings.append(WARN_LONG_ABSENCE)

        return ValidationResult(
            is_valid=not errors,
            working_days=working_days,
            available_days=available,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )
