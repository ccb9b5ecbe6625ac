from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.exceptions import AuthorizationError, NotFound
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from ..requests.model import VacationRequest
from ..requests.repository import RequestRepository
from ..requests.service import VacationRequestService
from .authority import ApprovalAuthority
from .model import PendingFilter, PendingRequestView

logger = logging.getLogger(__name__)


class ApprovalWorkflow:
    """Approver-facing queries and decisions.

    Decisions go through the request state machine after an authority check.
    """

    def __init__(
        self,
        *,
        requests: RequestRepository,
        employees: EmployeeDirectory,
        lifecycle: VacationRequestService,
        authority: ApprovalAuthority,
    ):
        self._requests = requests
        self._employees = employees
        self._lifecycle = lifecycle
        self._authority = authority

    def list_pending(
        self,
        filters: Optional[PendingFilter] = None,
        *,
        approver_id: Optional[int] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[PendingRequestView]:
        """Requests in `filters.status`, oldest submission first.

        With `approver_id`, only requests that approver may decide on are kept.
        """
        filters = filters or PendingFilter()

        employee_ids: Optional[set[int]] = None
        if filters.department is not None:
            employee_ids = {e.employee_id for e in self._employees.list_active(department=filters.department)}
        if filters.employee_id is not None:
            wanted = {int(filters.employee_id)}
            employee_ids = wanted if employee_ids is None else employee_ids & wanted

        rows = self._requests.list_by_status(
            filters.status,
            employee_ids=sorted(employee_ids) if employee_ids is not None else None,
            date_from=filters.date_from,
            date_to=filters.date_to,
            limit=limit,
        )

        cache: dict[int, Optional[Employee]] = {}
        views = []
        for req in rows:
            if req.employee_id not in cache:
                cache[req.employee_id] = self._employees.get_by_id(req.employee_id)
            employee = cache[req.employee_id]
            if approver_id is not None and not (employee and self._authority.can_decide(int(approver_id), employee)):
                continue
            views.append(self._to_view(req, employee))
        return views

    @staticmethod
    def _to_view(req: VacationRequest, employee: Optional[Employee]) -> PendingRequestView:
        return PendingRequestView(
            request_id=req.request_id,
            employee_id=req.employee_id,
            employee_name=employee.full_name if employee else f"#{req.employee_id}",
            department=employee.department if employee else None,
            start_date=req.start_date,
            end_date=req.end_date,
            type=req.type,
            requested_days=req.requested_days,
            status=req.status,
            submitted_at=req.submitted_at,
        )

    def _authorize(self, approver_id: int, request_id: int) -> None:
        req = self._lifecycle.get_request(request_id)
        employee = self._employees.get_by_id(req.employee_id)
        if not employee:
            raise NotFound("employee", req.employee_id)
        if not self._authority.can_decide(int(approver_id), employee):
            logger.warning("approver %s denied on request %s", approver_id, request_id)
            raise AuthorizationError(f"Employee {approver_id} cannot decide on request {request_id}")

    def approve(self, approver_id: int, request_id: int, comment: Optional[str] = None) -> VacationRequest:
        self._authorize(approver_id, request_id)
        return self._lifecycle.approve(request_id, comment=comment, approver_id=int(approver_id))

    def reject(self, approver_id: int, request_id: int, comment: Optional[str]) -> VacationRequest:
        self._authorize(approver_id, request_id)
        return self._lifecycle.reject(request_id, comment=comment, approver_id=int(approver_id))

    def can_view(self, viewer_id: int, employee_id: int) -> bool:
        """Own data, administrators, and whoever may decide the employee's requests."""
        if int(viewer_id) == int(employee_id) or self._authority.is_admin(int(viewer_id)):
            return True
        employee = self._employees.get_by_id(int(employee_id))
        return employee is not None and self._authority.can_decide(int(viewer_id), employee)

    def ensure_can_view(self, viewer_id: int, employee_id: int) -> None:
        if not self.can_view(viewer_id, employee_id):
            logger.warning("employee %s denied access to data of %s", viewer_id, employee_id)
            raise AuthorizationError(f"Employee {viewer_id} cannot view data of employee {employee_id}")
