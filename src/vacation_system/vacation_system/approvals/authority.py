from __future__ import annotations

from typing import Iterable, Protocol

from ..employees.model import Employee


class ApprovalAuthority(Protocol):
    """Decides who may act on whose vacation data."""

    def can_decide(self, approver_id: int, employee: Employee) -> bool:
        raise NotImplementedError

    def is_admin(self, employee_id: int) -> bool:
        """Policy management, bulk assignment, recalculation and audit reads."""
        raise NotImplementedError


class ManagerApprovalAuthority(ApprovalAuthority):
    """HR approvers decide for everyone, managers for their direct reports.

    Nobody decides on their own request. HR approvers are also the
    administrators.
    """

    def __init__(self, hr_approver_ids: Iterable[int] = ()):
        self._hr_approver_ids = frozenset(int(i) for i in hr_approver_ids)

    def is_admin(self, employee_id: int) -> bool:
        return int(employee_id) in self._hr_approver_ids

    def can_decide(self, approver_id: int, employee: Employee) -> bool:
        if int(approver_id) == employee.employee_id:
            return False
        if self.is_admin(approver_id):
            return True
        return employee.manager_employee_id is not None and int(employee.manager_employee_id) == int(approver_id)
