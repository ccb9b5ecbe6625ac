from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import RequestStatus, VacationType


@dataclass(frozen=True)
class PendingFilter:
    employee_id: Optional[int] = None
    department: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    status: RequestStatus = RequestStatus.SUBMITTED


@dataclass(frozen=True)
class PendingRequestView:
    """A request with the employee fields approvers need on screen."""

    request_id: int
    employee_id: int
    employee_name: str
    department: Optional[str]
    start_date: date
    end_date: date
    type: VacationType
    requested_days: Decimal
    status: RequestStatus
    submitted_at: Optional[datetime]
