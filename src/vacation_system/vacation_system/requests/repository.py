from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import RequestStatus, VacationType
from .model import VacationRequest


class RequestRepository(Protocol):
    """Persistence for vacation requests.

    Status changes are conditional on the expected current status and report
    False when the row was not in that status anymore.
    """

    def create(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        type: VacationType,
        requested_days: Decimal,
        now: datetime,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[VacationRequest]:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        status: Optional[RequestStatus] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[VacationRequest]:
        """Newest start date first."""

        raise NotImplementedError

    def list_by_status(
        self,
        status: RequestStatus,
        *,
        employee_ids: Optional[Iterable[int]] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[VacationRequest]:
        """Oldest submission first; the date window matches requests that overlap it."""

        raise NotImplementedError

    def find_overlapping(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        *,
        statuses: Iterable[RequestStatus],
        exclude_request_id: Optional[int] = None,
    ) -> Sequence[VacationRequest]:
        raise NotImplementedError

    def sum_requested_days(self, employee_id: int, year: int, *, statuses: Iterable[RequestStatus]) -> Decimal:
        """Total requested_days of requests starting in `year`."""

        raise NotImplementedError

    def mark_submitted(self, request_id: int, *, requested_days: Decimal, now: datetime) -> bool:
        raise NotImplementedError

    def record_decision(
        self,
        request_id: int,
        *,
        status: RequestStatus,
        approver_employee_id: Optional[int],
        comment: Optional[str],
        now: datetime,
    ) -> bool:
        raise NotImplementedError

    def mark_cancelled(self, request_id: int, *, expected_status: RequestStatus, now: datetime) -> bool:
        raise NotImplementedError
