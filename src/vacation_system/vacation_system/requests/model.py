from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import RequestStatus, VacationType


@dataclass(frozen=True)
class VacationRequest:
    request_id: int
    employee_id: int
    start_date: date
    end_date: date
    type: VacationType
    requested_days: Decimal
    status: RequestStatus
    approver_employee_id: Optional[int] = None
    approver_comment: Optional[str] = None
    submitted_at: Optional[datetime] = None
    decision_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def balance_year(self) -> int:
        """Requests are charged to the balance of the year they start in."""
        return self.start_date.year


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation preview.

    errors block creation and submission, warnings are informational.
    """

    is_valid: bool
    working_days: Decimal
    available_days: Decimal
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
