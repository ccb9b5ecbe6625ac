from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterable, Optional

from .absences.mysql_absence_repository import MySQLAbsenceRepository
from .absences.repository import AbsenceRepository
from .approvals.authority import ApprovalAuthority, ManagerApprovalAuthority
from .approvals.service import ApprovalWorkflow
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .audit.service import AuditTrail
from .balances.mysql_balance_repository import MySQLBalanceRepository
from .balances.repository import BalanceRepository
from .balances.service import BalanceLedger
from .common.datetime_utils import now_local
from .common.locks import KeyLock, ThreadingKeyLock
from .core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS
from .core.exceptions import ValidationError
from .database.connection import DBConfig, DatabaseConnection
from .database.mysql_lock import MySQLNamedLock
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory
from .policies.mysql_policy_repository import MySQLPolicyRepository
from .policies.repository import PolicyRepository
from .policies.service import PolicyService
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.repository import RequestRepository
from .requests.service import VacationRequestService
from .requests.validator import RequestValidator
from .workdays.calculator import WeekendHolidayCalculator, WorkingDayCalculator
from .workdays.holiday_calendar import HolidayCalendar, StaticHolidayCalendar
from .workdays.mysql_holiday_calendar import MySQLHolidayCalendar


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeDirectory
    policies_repo: PolicyRepository
    balances_repo: BalanceRepository
    requests_repo: RequestRepository
    absences_repo: AbsenceRepository
    audit_repo: AuditRepository

    lock: KeyLock
    authority: ApprovalAuthority
    calculator: WorkingDayCalculator
    clock: Callable[[], datetime]

    audit_trail: AuditTrail
    policy_service: PolicyService
    balance_ledger: BalanceLedger
    request_validator: RequestValidator
    request_service: VacationRequestService
    approval_workflow: ApprovalWorkflow


def assemble(
    *,
    employees_repo: EmployeeDirectory,
    policies_repo: PolicyRepository,
    balances_repo: BalanceRepository,
    requests_repo: RequestRepository,
    absences_repo: AbsenceRepository,
    audit_repo: AuditRepository,
    holidays: HolidayCalendar,
    lock: KeyLock,
    authority: ApprovalAuthority,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services over already-built repositories (MySQL or in-memory)."""
    calculator = WeekendHolidayCalculator(holidays)

    audit_trail = AuditTrail(audit_repo, clock=clock)
    policy_service = PolicyService(policies_repo, balances_repo, audit=audit_trail, clock=clock)
    balance_ledger = BalanceLedger(
        employees=employees_repo,
        policies=policies_repo,
        balances=balances_repo,
        requests=requests_repo,
        lock=lock,
        audit=audit_trail,
        clock=clock,
    )
    request_validator = RequestValidator(
        requests=requests_repo,
        ledger=balance_ledger,
        calculator=calculator,
        clock=clock,
    )
    request_service = VacationRequestService(
        requests=requests_repo,
        validator=request_validator,
        ledger=balance_ledger,
        calculator=calculator,
        lock=lock,
        absences=absences_repo,
        audit=audit_trail,
        clock=clock,
    )
    approval_workflow = ApprovalWorkflow(
        requests=requests_repo,
        employees=employees_repo,
        lifecycle=request_service,
        authority=authority,
    )

    return Container(
        employees_repo=employees_repo,
        policies_repo=policies_repo,
        balances_repo=balances_repo,
        requests_repo=requests_repo,
        absences_repo=absences_repo,
        audit_repo=audit_repo,
        lock=lock,
        authority=authority,
        calculator=calculator,
        clock=clock,
        audit_trail=audit_trail,
        policy_service=policy_service,
        balance_ledger=balance_ledger,
        request_validator=request_validator,
        request_service=request_service,
        approval_workflow=approval_workflow,
    )


def build_container(
    *,
    db_config: dict,
    lock_backend: str = "mysql",
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
    holiday_source: str = "database",
    holidays: Optional[Iterable[date]] = None,
    hr_approver_ids: Iterable[int] = (),
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    if lock_backend == "mysql":
        lock: KeyLock = MySQLNamedLock(conn, timeout=lock_timeout)
    elif lock_backend == "thread":
        lock = ThreadingKeyLock(timeout=lock_timeout)
    else:
        raise ValidationError(f"Unknown LOCK_BACKEND: {lock_backend}")

    if holiday_source == "database":
        calendar: HolidayCalendar = MySQLHolidayCalendar(conn)
    elif holiday_source == "static":
        calendar = StaticHolidayCalendar(holidays or ())
    else:
        raise ValidationError(f"Unknown HOLIDAY_SOURCE: {holiday_source}")

    return assemble(
        employees_repo=MySQLEmployeeDirectory(conn),
        policies_repo=MySQLPolicyRepository(conn),
        balances_repo=MySQLBalanceRepository(conn),
        requests_repo=MySQLRequestRepository(conn),
        absences_repo=MySQLAbsenceRepository(conn),
        audit_repo=MySQLAuditRepository(conn),
        holidays=calendar,
        lock=lock,
        authority=ManagerApprovalAuthority(hr_approver_ids),
    )
