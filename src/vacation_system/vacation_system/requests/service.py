from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..absences.model import AbsenceDay
from ..absences.repository import AbsenceRepository
from ..audit.service import AuditTrail
from ..balances.service import BalanceLedger
from ..common.datetime_utils import now_local
from ..common.locks import KeyLock, balance_key, hold_all
from ..core.constants import AUDIT_REQUEST, DEFAULT_LIST_LIMIT, ERR_INSUFFICIENT_BALANCE
from ..core.enums import ALLOWED_TRANSITIONS, AuditAction, RequestStatus, VacationType
from ..core.exceptions import (
    AuthorizationError,
    CommentRequired,
    InsufficientBalance,
    InvalidTransition,
    NotFound,
    ValidationError,
    ValidationFailed,
)
from ..workdays.calculator import WorkingDayCalculator
from ..workdays.model import RequestDay
from .model import ValidationResult, VacationRequest
from .repository import RequestRepository
from .validator import RequestValidator

logger = logging.getLogger(__name__)


def _parse_type(value) -> VacationType:
    if isinstance(value, VacationType):
        return value
    try:
        return VacationType(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError("Type must be VACATION, PERSONAL or OTHER")


def _status_only(req: VacationRequest) -> dict:
    return {"status": req.status}


class VacationRequestService:
    """Owns the request state machine and the ledger side effects of each transition.

    DRAFT -> SUBMITTED reserves the working days on the start-year balance;
    SUBMITTED -> REJECTED / CANCELLED releases them; APPROVED keeps them and
    writes the absence calendar.
    """

    def __init__(
        self,
        *,
        requests: RequestRepository,
        validator: RequestValidator,
        ledger: BalanceLedger,
        calculator: WorkingDayCalculator,
        lock: KeyLock,
        absences: AbsenceRepository,
        audit: AuditTrail,
        clock: Callable[[], datetime] = now_local,
    ):
        self._requests = requests
        self._validator = validator
        self._ledger = ledger
        self._calculator = calculator
        self._lock = lock
        self._absences = absences
        self._audit = audit
        self._clock = clock

    # -------- Queries --------
    def validate(self, employee_id: int, start_date: date, end_date: date) -> ValidationResult:
        return self._validator.validate(int(employee_id), start_date, end_date)

    def get_request(self, request_id: int) -> VacationRequest:
        req = self._requests.get_by_id(int(request_id))
        if not req:
            raise NotFound("request", int(request_id))
        return req

    def list_mine(
        self,
        employee_id: int,
        *,
        status: Optional[RequestStatus] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[VacationRequest]:
        return self._requests.list_for_employee(int(employee_id), status=status, limit=limit)

    def request_days(self, request_id: int) -> list[RequestDay]:
        req = self.get_request(request_id)
        return self._calculator.breakdown(req.start_date, req.end_date)

    def list_absences(
        self,
        employee_id: int,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Sequence[AbsenceDay]:
        return self._absences.list_for_employee(int(employee_id), date_from=date_from, date_to=date_to)

    # -------- Guards --------
    @staticmethod
    def _ensure_transition(req: VacationRequest, target: RequestStatus) -> None:
        if target not in ALLOWED_TRANSITIONS[req.status]:
            raise InvalidTransition(req.status, target)

    @staticmethod
    def _ensure_owner(req: VacationRequest, employee_id: Optional[int]) -> None:
        if employee_id is not None and int(employee_id) != req.employee_id:
            raise AuthorizationError("Only the requesting employee can change this request")

    def _lost_race(self, request_id: int, target: RequestStatus) -> InvalidTransition:
        current = self.get_request(request_id)
        return InvalidTransition(current.status, target)

    def _hold(self, req: VacationRequest):
        # Every year the range touches, so overlap checks see requests charged to either year.
        years = range(req.start_date.year, req.end_date.year + 1)
        return hold_all(self._lock, [balance_key(req.employee_id, y) for y in years])

    def _sync_absences(self, req: VacationRequest) -> int:
        days = []
        if req.status == RequestStatus.APPROVED:
            days = [d.date for d in self._calculator.breakdown(req.start_date, req.end_date) if d.counted_days > 0]
        return self._absences.replace_for_request(
            req.request_id,
            employee_id=req.employee_id,
            days=days,
            absence_type=req.type,
            now=self._clock(),
        )

    # -------- Transitions --------
    def create(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        type=VacationType.VACATION,
    ) -> VacationRequest:
        request_type = _parse_type(type)
        result = self._validator.validate(int(employee_id), start_date, end_date)
        if not result.is_valid:
            raise ValidationFailed(result.errors)

        request_id = self._requests.create(
            employee_id=int(employee_id),
            start_date=start_date,
            end_date=end_date,
            type=request_type,
            requested_days=result.working_days,
            now=self._clock(),
        )
        logger.info(
            "request %s created for employee %s (%s..%s, %s days)",
            request_id,
            employee_id,
            start_date,
            end_date,
            result.working_days,
        )
        req = self.get_request(request_id)
        self._audit.record(AUDIT_REQUEST, request_id, AuditAction.CREATE, performed_by=employee_id, new=req)
        return req

    def submit(self, request_id: int, *, employee_id: Optional[int] = None) -> VacationRequest:
        req = self.get_request(request_id)
        self._ensure_owner(req, employee_id)
        self._ensure_transition(req, RequestStatus.SUBMITTED)

        year = req.balance_year
        with self._hold(req):
            req = self.get_request(request_id)
            self._ensure_transition(req, RequestStatus.SUBMITTED)

            result = self._validator.validate(
                req.employee_id, req.start_date, req.end_date, exclude_request_id=req.request_id
            )
            if not result.is_valid:
                if result.errors == (ERR_INSUFFICIENT_BALANCE,):
                    raise InsufficientBalance(req.employee_id, year, result.working_days, result.available_days)
                raise ValidationFailed(result.errors)

            self._ledger.allocate(req.employee_id, year)
            self._ledger.reserve(req.employee_id, year, result.working_days)
            if not self._requests.mark_submitted(req.request_id, requested_days=result.working_days, now=self._clock()):
                self._ledger.release(req.employee_id, year, result.working_days)
                raise self._lost_race(req.request_id, RequestStatus.SUBMITTED)

        logger.info("request %s submitted, reserved %s days for %s", req.request_id, result.working_days, year)
        submitted = self.get_request(req.request_id)
        self._audit.record(
            AUDIT_REQUEST,
            req.request_id,
            AuditAction.SUBMIT,
            performed_by=employee_id if employee_id is not None else req.employee_id,
            old=_status_only(req),
            new={"status": submitted.status, "requested_days": submitted.requested_days},
        )
        return submitted

    def approve(
        self,
        request_id: int,
        *,
        comment: Optional[str] = None,
        approver_id: Optional[int] = None,
    ) -> VacationRequest:
        req = self.get_request(request_id)
        self._ensure_transition(req, RequestStatus.APPROVED)

        if not self._requests.record_decision(
            req.request_id,
            status=RequestStatus.APPROVED,
            approver_employee_id=approver_id,
            comment=(comment or "").strip() or None,
            now=self._clock(),
        ):
            raise self._lost_race(req.request_id, RequestStatus.APPROVED)

        approved = self.get_request(req.request_id)
        written = self._sync_absences(approved)
        logger.info("request %s approved by %s, %s absence days", req.request_id, approver_id, written)
        self._audit.record(
            AUDIT_REQUEST,
            req.request_id,
            AuditAction.APPROVE,
            performed_by=approver_id,
            old=_status_only(req),
            new={"status": approved.status, "approver_comment": approved.approver_comment},
        )
        return approved

    def reject(
        self,
        request_id: int,
        *,
        comment: Optional[str],
        approver_id: Optional[int] = None,
    ) -> VacationRequest:
        req = self.get_request(request_id)
        self._ensure_transition(req, RequestStatus.REJECTED)
        comment = (comment or "").strip()
        if not comment:
            raise CommentRequired()

        year = req.balance_year
        with self._hold(req):
            # Decide first: the conditional update lets only one of reject/cancel release the days.
            if not self._requests.record_decision(
                req.request_id,
                status=RequestStatus.REJECTED,
                approver_employee_id=approver_id,
                comment=comment,
                now=self._clock(),
            ):
                raise self._lost_race(req.request_id, RequestStatus.REJECTED)
            self._ledger.release(req.employee_id, year, req.requested_days)

        logger.info("request %s rejected by %s, released %s days", req.request_id, approver_id, req.requested_days)
        self._audit.record(
            AUDIT_REQUEST,
            req.request_id,
            AuditAction.REJECT,
            performed_by=approver_id,
            old=_status_only(req),
            new={"status": RequestStatus.REJECTED, "approver_comment": comment},
        )
        return self.get_request(req.request_id)

    def cancel(self, request_id: int, *, employee_id: Optional[int] = None) -> VacationRequest:
        req = self.get_request(request_id)
        self._ensure_owner(req, employee_id)
        self._ensure_transition(req, RequestStatus.CANCELLED)

        year = req.balance_year
        with self._hold(req):
            if not self._requests.mark_cancelled(req.request_id, expected_status=req.status, now=self._clock()):
                raise self._lost_race(req.request_id, RequestStatus.CANCELLED)
            if req.status == RequestStatus.SUBMITTED:
                self._ledger.release(req.employee_id, year, req.requested_days)

        logger.info("request %s cancelled from %s", req.request_id, req.status.value)
        self._audit.record(
            AUDIT_REQUEST,
            req.request_id,
            AuditAction.CANCEL,
            performed_by=employee_id if employee_id is not None else req.employee_id,
            old=_status_only(req),
            new={"status": RequestStatus.CANCELLED},
        )
        return self.get_request(req.request_id)
