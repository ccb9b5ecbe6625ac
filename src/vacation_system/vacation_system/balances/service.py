from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Sequence

from ..audit.service import AuditTrail
from ..common.datetime_utils import now_local
from ..common.locks import KeyLock, balance_key
from ..common.validators import require_non_negative
from ..core.constants import AUDIT_BALANCE, AUDIT_POLICY, NO_POLICY_NAME
from ..core.enums import RESERVING_STATUSES, AuditAction
from ..core.exceptions import InsufficientBalance, NotFound, ValidationError
from ..employees.repository import EmployeeDirectory
from ..policies.model import VacationPolicy
from ..policies.repository import PolicyRepository
from ..requests.repository import RequestRepository
from .model import BulkAssignResult, TeamBalanceRow, VacationBalance
from .repository import BalanceRepository

logger = logging.getLogger(__name__)


class BalanceLedger:
    """Allocated vs used vacation days per (employee, year).

    Every mutation of one key runs under the key lock, and the repository
    re-checks 0 <= used <= allocated on write.
    """

    def __init__(
        self,
        *,
        employees: EmployeeDirectory,
        policies: PolicyRepository,
        balances: BalanceRepository,
        requests: RequestRepository,
        lock: KeyLock,
        audit: AuditTrail,
        clock: Callable[[], datetime] = now_local,
    ):
        self._employees = employees
        self._policies = policies
        self._balances = balances
        self._requests = requests
        self._lock = lock
        self._audit = audit
        self._clock = clock

    # -------- Allocation --------
    def _allocation_for(self, policy: VacationPolicy, employee_id: int, year: int) -> Decimal:
        previous = self._balances.get(employee_id, year - 1)
        return policy.allocation_for(previous.remaining_days if previous else None)

    def bulk_assign(self, policy_id: int, year: int, *, performed_by: Optional[int] = None) -> BulkAssignResult:
        policy = self._policies.get_by_id(int(policy_id))
        if not policy:
            raise NotFound("policy", int(policy_id))
        if policy.year != int(year):
            raise ValidationError(f"Policy {policy.policy_id} applies to {policy.year}, not {year}")

        created = skipped = 0
        employees = self._employees.list_active()
        for employee in employees:
            with self._lock.hold(balance_key(employee.employee_id, year)):
                if self._balances.get(employee.employee_id, year):
                    skipped += 1
                    continue

                allocated = self._allocation_for(policy, employee.employee_id, year)
                if self._balances.create(
                    employee_id=employee.employee_id,
                    policy_id=policy.policy_id,
                    year=int(year),
                    allocated_days=allocated,
                    now=self._clock(),
                ):
                    created += 1
                else:
                    skipped += 1

        logger.info(
            "bulk assign policy=%s year=%s: created=%s skipped=%s", policy.policy_id, year, created, skipped
        )
        result = BulkAssignResult(created=created, skipped=skipped, total=len(employees))
        self._audit.record(
            AUDIT_POLICY,
            policy.policy_id,
            AuditAction.BULK_ASSIGN,
            performed_by=performed_by,
            new={"year": int(year), "result": result},
        )
        return result

    def _active_employee(self, employee_id: int):
        employee = self._employees.get_by_id(int(employee_id))
        if not employee or not employee.is_active:
            raise NotFound("employee", int(employee_id))
        return employee

    def allocate(self, employee_id: int, year: int) -> VacationBalance:
        """Return the balance for (employee, year), creating it from the year's default policy."""
        with self._lock.hold(balance_key(employee_id, year)):
            existing = self._balances.get(int(employee_id), int(year))
            if existing:
                return existing

            self._active_employee(employee_id)
            policy = self._policies.default_for_year(int(year))
            if not policy:
                raise NotFound("policy", int(year))

            allocated = self._allocation_for(policy, int(employee_id), int(year))
            self._balances.create(
                employee_id=int(employee_id),
                policy_id=policy.policy_id,
                year=int(year),
                allocated_days=allocated,
                now=self._clock(),
            )
            logger.info("allocated %s days to employee %s for %s", allocated, employee_id, year)
            return self.get_balance(employee_id, year)

    def preview_allocation(self, employee_id: int, year: int) -> Optional[Decimal]:
        """Days `allocate` would grant, without writing anything.

        None when the employee is unknown/inactive or no policy covers the year.
        """
        existing = self._balances.get(int(employee_id), int(year))
        if existing:
            return existing.allocated_days

        employee = self._employees.get_by_id(int(employee_id))
        if not employee or not employee.is_active:
            return None
        policy = self._policies.default_for_year(int(year))
        if not policy:
            return None
        return self._allocation_for(policy, int(employee_id), int(year))

    # -------- Queries --------
    def find_balance(self, employee_id: int, year: int) -> Optional[VacationBalance]:
        return self._balances.get(int(employee_id), int(year))

    def get_balance(self, employee_id: int, year: int) -> VacationBalance:
        balance = self._balances.get(int(employee_id), int(year))
        if not balance:
            raise NotFound("balance", f"{int(employee_id)}/{int(year)}")
        return balance

    def get_team_balances(self, department: Optional[str], year: int) -> Sequence[TeamBalanceRow]:
        employees = self._employees.list_active(department=department)
        balances = {
            b.employee_id: b
            for b in self._balances.list_for_year(int(year), employee_ids=[e.employee_id for e in employees])
        }
        policy_names: dict[int, str] = {}

        rows = []
        for employee in employees:
            balance = balances.get(employee.employee_id)
            policy_name = NO_POLICY_NAME
            if balance:
                if balance.policy_id not in policy_names:
                    policy = self._policies.get_by_id(balance.policy_id)
                    policy_names[balance.policy_id] = policy.name if policy else NO_POLICY_NAME
                policy_name = policy_names[balance.policy_id]

            allocated = balance.allocated_days if balance else Decimal("0")
            used = balance.used_days if balance else Decimal("0")
            rows.append(
                TeamBalanceRow(
                    employee_id=employee.employee_id,
                    full_name=employee.full_name,
                    department=employee.department,
                    year=int(year),
                    allocated_days=allocated,
                    used_days=used,
                    remaining_days=allocated - used,
                    policy_name=policy_name,
                )
            )
        return rows

    # -------- Mutations --------
    def reserve(self, employee_id: int, year: int, days) -> VacationBalance:
        days = require_non_negative(days, "Days")
        with self._lock.hold(balance_key(employee_id, year)):
            balance = self.get_balance(employee_id, year)
            if balance.used_days + days > balance.allocated_days:
                raise InsufficientBalance(employee_id, year, days, balance.remaining_days)

            if not self._balances.add_used(employee_id=int(employee_id), year=int(year), days=days, now=self._clock()):
                # Another writer outside this lock got there first.
                current = self.get_balance(employee_id, year)
                raise InsufficientBalance(employee_id, year, days, current.remaining_days)

            logger.info("reserved %s days on balance %s/%s", days, employee_id, year)
            return self.get_balance(employee_id, year)

    def release(self, employee_id: int, year: int, days) -> VacationBalance:
        days = require_non_negative(days, "Days")
        with self._lock.hold(balance_key(employee_id, year)):
            balance = self.get_balance(employee_id, year)
            if days > balance.used_days:
                logger.warning(
                    "release of %s days on %s/%s exceeds used %s, flooring at 0",
                    days,
                    employee_id,
                    year,
                    balance.used_days,
                )
            self._balances.subtract_used(employee_id=int(employee_id), year=int(year), days=days, now=self._clock())
            logger.info("released %s days on balance %s/%s", days, employee_id, year)
            return self.get_balance(employee_id, year)

    def recalculate(self, employee_id: int, year: int, *, performed_by: Optional[int] = None) -> VacationBalance:
        """Rebuild used_days from the submitted and approved requests starting in `year`."""
        with self._lock.hold(balance_key(employee_id, year)):
            balance = self.get_balance(employee_id, year)
            used = self._requests.sum_requested_days(int(employee_id), int(year), statuses=RESERVING_STATUSES)
            if used > balance.allocated_days:
                raise InsufficientBalance(employee_id, year, used, balance.allocated_days)

            self._balances.set_used(employee_id=int(employee_id), year=int(year), used_days=used, now=self._clock())
            logger.info("recalculated balance %s/%s: used %s -> %s", employee_id, year, balance.used_days, used)
            updated = self.get_balance(employee_id, year)
        self._audit.record(
            AUDIT_BALANCE, updated.balance_id, AuditAction.RECALCULATE, performed_by=performed_by, old=balance, new=updated
        )
        return updated
