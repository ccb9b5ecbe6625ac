from datetime import date, datetime, timedelta
from itertools import count

import pytest

from src.vacation_system.vacation_system.approvals.authority import ManagerApprovalAuthority
from src.vacation_system.vacation_system.approvals.model import PendingFilter
from src.vacation_system.vacation_system.core.enums import RequestStatus
from src.vacation_system.vacation_system.core.exceptions import AuthorizationError, CommentRequired
from src.vacation_system.vacation_system.employees.model import Employee


@pytest.fixture
def clock():
    # Advances a minute per call so submissions get distinct timestamps.
    ticks = count()
    return lambda: datetime(2026, 3, 2, 9, 0) + timedelta(minutes=next(ticks))


@pytest.fixture
def submitted(container, balances):
    """Three submitted requests; submission order differs from creation order."""
    for employee_id in (1, 3, 4):
        balances.put(employee_id=employee_id, year=2026, allocated="22")

    service = container.request_service
    ana = service.create(employee_id=3, start_date=date(2026, 4, 6), end_date=date(2026, 4, 7))
    jorge = service.create(employee_id=4, start_date=date(2026, 6, 1), end_date=date(2026, 6, 2))
    laura = service.create(employee_id=1, start_date=date(2026, 5, 4), end_date=date(2026, 5, 5))

    return {
        "jorge": service.submit(jorge.request_id),
        "ana": service.submit(ana.request_id),
        "laura": service.submit(laura.request_id),
    }


def test_list_pending_oldest_submission_first_with_employee_fields(container, submitted):
    rows = container.approval_workflow.list_pending()

    assert [r.request_id for r in rows] == [
        submitted["jorge"].request_id,
        submitted["ana"].request_id,
        submitted["laura"].request_id,
    ]
    assert (rows[0].employee_name, rows[0].department) == ("Jorge Ruiz", "IT")


def test_list_pending_filters(container, submitted):
    workflow = container.approval_workflow

    assert [r.employee_id for r in workflow.list_pending(PendingFilter(department="IT"))] == [4, 3]
    assert [r.employee_id for r in workflow.list_pending(PendingFilter(employee_id=3))] == [3]
    assert workflow.list_pending(PendingFilter(employee_id=3, department="HR")) == []
    window = PendingFilter(date_from=date(2026, 5, 1), date_to=date(2026, 5, 31))
    assert [r.employee_id for r in workflow.list_pending(window)] == [1]
    assert workflow.list_pending(PendingFilter(status=RequestStatus.APPROVED)) == []


def test_manager_approves_direct_report(container, submitted):
    req = container.approval_workflow.approve(2, submitted["ana"].request_id, "ok")

    assert req.status == RequestStatus.APPROVED
    assert req.approver_employee_id == 2
    assert [r.employee_id for r in container.approval_workflow.list_pending()] == [4, 1]


def test_hr_rejects_anyone_but_not_themselves(container, balances, submitted):
    before = balances.get(4, 2026).used_days

    req = container.approval_workflow.reject(1, submitted["jorge"].request_id, "Team offsite")
    assert req.status == RequestStatus.REJECTED
    assert balances.get(4, 2026).used_days == before - submitted["jorge"].requested_days

    with pytest.raises(AuthorizationError):
        container.approval_workflow.approve(1, submitted["laura"].request_id)


def test_unrelated_employee_cannot_decide(container, submitted):
    with pytest.raises(AuthorizationError):
        container.approval_workflow.approve(4, submitted["ana"].request_id)
    assert container.request_service.get_request(submitted["ana"].request_id).status == RequestStatus.SUBMITTED


def test_reject_through_workflow_still_requires_comment(container, submitted):
    with pytest.raises(CommentRequired):
        container.approval_workflow.reject(2, submitted["ana"].request_id, "  ")


def test_manager_authority_rules():
    authority = ManagerApprovalAuthority(hr_approver_ids=[1])
    ana = Employee(employee_id=3, full_name="Ana", manager_employee_id=2)
    laura = Employee(employee_id=1, full_name="Laura")

    assert authority.can_decide(2, ana)
    assert authority.can_decide(1, ana)
    assert not authority.can_decide(4, ana)
    assert not authority.can_decide(3, ana)
    assert not authority.can_decide(1, laura)


def test_list_pending_for_an_approver_keeps_only_requests_they_may_decide(container, submitted):
    workflow = container.approval_workflow

    assert [r.employee_id for r in workflow.list_pending(approver_id=2)] == [4, 3]
    assert [r.employee_id for r in workflow.list_pending(approver_id=1)] == [4, 3]
    assert workflow.list_pending(approver_id=3) == []


def test_can_view_own_reports_or_everything_as_admin(container):
    workflow = container.approval_workflow

    assert workflow.can_view(3, 3)
    assert workflow.can_view(2, 3)
    assert workflow.can_view(1, 4)
    assert not workflow.can_view(4, 3)
    with pytest.raises(AuthorizationError):
        workflow.ensure_can_view(3, 2)


def test_only_hr_approvers_are_admins():
    authority = ManagerApprovalAuthority(hr_approver_ids=["1"])

    assert authority.is_admin(1)
    assert not authority.is_admin(2)
