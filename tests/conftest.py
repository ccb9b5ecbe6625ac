from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from src.vacation_system.vacation_system.absences.model import AbsenceDay
from src.vacation_system.vacation_system.approvals.authority import ManagerApprovalAuthority
from src.vacation_system.vacation_system.audit.model import AuditEntry
from src.vacation_system.vacation_system.balances.model import VacationBalance
from src.vacation_system.vacation_system.common.locks import ThreadingKeyLock
from src.vacation_system.vacation_system.container import assemble
from src.vacation_system.vacation_system.core.enums import AccrualType, RequestStatus
from src.vacation_system.vacation_system.employees.model import Employee
from src.vacation_system.vacation_system.policies.model import VacationPolicy
from src.vacation_system.vacation_system.requests.model import VacationRequest
from src.vacation_system.vacation_system.workdays.holiday_calendar import StaticHolidayCalendar

# Monday
NOW = datetime(2026, 3, 2, 9, 0, 0)

HOLIDAYS = {date(2026, 1, 1), date(2026, 5, 1), date(2026, 12, 25), date(2027, 1, 1)}


class FakeEmployees:
    def __init__(self, employees):
        self._by_id = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id):
        return self._by_id.get(int(employee_id))

    def list_active(self, *, department=None):
        rows = [
            e
            for e in self._by_id.values()
            if e.is_active and (department is None or e.department == department)
        ]
        return sorted(rows, key=lambda e: (e.full_name, e.employee_id))


class FakePolicies:
    def __init__(self):
        self._next_id = 1
        self._by_id: dict[int, VacationPolicy] = {}

    def get_by_id(self, policy_id):
        return self._by_id.get(int(policy_id))

    def list_policies(self, *, year=None):
        rows = [p for p in self._by_id.values() if year is None or p.year == int(year)]
        return sorted(rows, key=lambda p: (-p.year, p.name))

    def default_for_year(self, year):
        rows = [p for p in self._by_id.values() if p.year == int(year)]
        return min(rows, key=lambda p: p.policy_id) if rows else None

    def name_taken(self, *, name, year, exclude_policy_id=None):
        return any(
            p.name == name and p.year == int(year) and p.policy_id != exclude_policy_id
            for p in self._by_id.values()
        )

    def create(self, *, name, year, accrual_type, total_days_per_year, carry_over_max_days, now):
        pid = self._next_id
        self._next_id += 1
        self._by_id[pid] = VacationPolicy(
            policy_id=pid,
            name=name,
            year=int(year),
            accrual_type=accrual_type,
            total_days_per_year=Decimal(total_days_per_year),
            carry_over_max_days=Decimal(carry_over_max_days),
            created_at=now,
            updated_at=now,
        )
        return pid

    def update(self, policy):
        if policy.policy_id not in self._by_id:
            return False
        self._by_id[policy.policy_id] = policy
        return True

    def delete(self, policy_id):
        return self._by_id.pop(int(policy_id), None) is not None


class FakeBalances:
    """Thread-safe; enforces the same conditions as the SQL statements."""

    def __init__(self):
        self._mutex = threading.Lock()
        self._next_id = 1
        self._rows: dict[tuple[int, int], VacationBalance] = {}

    def put(self, *, employee_id, year, allocated, used="0", policy_id=1):
        return self.create(
            employee_id=employee_id, policy_id=policy_id, year=year, allocated_days=Decimal(allocated), now=NOW
        ) and self.set_used(employee_id=employee_id, year=year, used_days=Decimal(used), now=NOW)

    def get(self, employee_id, year):
        with self._mutex:
            return self._rows.get((int(employee_id), int(year)))

    def list_for_year(self, year, *, employee_ids=None):
        wanted = None if employee_ids is None else {int(e) for e in employee_ids}
        with self._mutex:
            rows = [b for b in self._rows.values() if b.year == int(year)]
        return sorted(
            (b for b in rows if wanted is None or b.employee_id in wanted), key=lambda b: b.employee_id
        )

    def create(self, *, employee_id, policy_id, year, allocated_days, now):
        key = (int(employee_id), int(year))
        with self._mutex:
            if key in self._rows:
                return False
            self._rows[key] = VacationBalance(
                balance_id=self._next_id,
                employee_id=int(employee_id),
                policy_id=int(policy_id),
                year=int(year),
                allocated_days=Decimal(allocated_days),
                used_days=Decimal("0"),
                updated_at=now,
            )
            self._next_id += 1
            return True

    def add_used(self, *, employee_id, year, days, now):
        key = (int(employee_id), int(year))
        with self._mutex:
            b = self._rows.get(key)
            if not b or b.used_days + days > b.allocated_days:
                return False
            self._rows[key] = replace(b, used_days=b.used_days + days, updated_at=now)
            return True

    def subtract_used(self, *, employee_id, year, days, now):
        key = (int(employee_id), int(year))
        with self._mutex:
            b = self._rows.get(key)
            if not b:
                return False
            self._rows[key] = replace(b, used_days=max(b.used_days - days, Decimal("0")), updated_at=now)
            return True

    def set_used(self, *, employee_id, year, used_days, now):
        key = (int(employee_id), int(year))
        with self._mutex:
            b = self._rows.get(key)
            if not b or used_days < 0 or used_days > b.allocated_days:
                return False
            self._rows[key] = replace(b, used_days=Decimal(used_days), updated_at=now)
            return True

    def count_by_policy(self, policy_id):
        with self._mutex:
            return sum(1 for b in self._rows.values() if b.policy_id == int(policy_id))


class FakeRequests:
    def __init__(self):
        self._mutex = threading.Lock()
        self._next_id = 1
        self._rows: dict[int, VacationRequest] = {}

    def create(self, *, employee_id, start_date, end_date, type, requested_days, now):
        with self._mutex:
            rid = self._next_id
            self._next_id += 1
            self._rows[rid] = VacationRequest(
                request_id=rid,
                employee_id=int(employee_id),
                start_date=start_date,
                end_date=end_date,
                type=type,
                requested_days=Decimal(requested_days),
                status=RequestStatus.DRAFT,
                created_at=now,
                updated_at=now,
            )
            return rid

    def get_by_id(self, request_id):
        with self._mutex:
            return self._rows.get(int(request_id))

    def _all(self):
        with self._mutex:
            return list(self._rows.values())

    def list_for_employee(self, employee_id, *, status=None, limit=500):
        rows = [r for r in self._all() if r.employee_id == int(employee_id) and (status is None or r.status == status)]
        rows.sort(key=lambda r: (r.start_date, r.request_id), reverse=True)
        return rows[:limit]

    def list_by_status(self, status, *, employee_ids=None, date_from=None, date_to=None, limit=500):
        wanted = None if employee_ids is None else {int(e) for e in employee_ids}
        rows = [
            r
            for r in self._all()
            if r.status == status
            and (wanted is None or r.employee_id in wanted)
            and (date_from is None or r.end_date >= date_from)
            and (date_to is None or r.start_date <= date_to)
        ]
        rows.sort(key=lambda r: (r.submitted_at is None, r.submitted_at or datetime.min, r.request_id))
        return rows[:limit]

    def find_overlapping(self, employee_id, start_date, end_date, *, statuses, exclude_request_id=None):
        statuses = set(statuses)
        return [
            r
            for r in self._all()
            if r.employee_id == int(employee_id)
            and r.status in statuses
            and r.request_id != exclude_request_id
            and r.start_date <= end_date
            and start_date <= r.end_date
        ]

    def sum_requested_days(self, employee_id, year, *, statuses):
        statuses = set(statuses)
        return sum(
            (
                r.requested_days
                for r in self._all()
                if r.employee_id == int(employee_id) and r.start_date.year == int(year) and r.status in statuses
            ),
            Decimal("0"),
        )

    def _transition(self, request_id, expected, **changes):
        with self._mutex:
            r = self._rows.get(int(request_id))
            if not r or r.status != expected:
                return False
            self._rows[int(request_id)] = replace(r, **changes)
            return True

    def mark_submitted(self, request_id, *, requested_days, now):
        return self._transition(
            request_id,
            RequestStatus.DRAFT,
            status=RequestStatus.SUBMITTED,
            requested_days=requested_days,
            submitted_at=now,
            updated_at=now,
        )

    def record_decision(self, request_id, *, status, approver_employee_id, comment, now):
        return self._transition(
            request_id,
            RequestStatus.SUBMITTED,
            status=status,
            approver_employee_id=approver_employee_id,
            approver_comment=comment,
            decision_at=now,
            updated_at=now,
        )

    def mark_cancelled(self, request_id, *, expected_status, now):
        return self._transition(request_id, expected_status, status=RequestStatus.CANCELLED, updated_at=now)


class FakeAbsences:
    def __init__(self):
        self._next_id = 1
        self._rows: list[AbsenceDay] = []

    def replace_for_request(self, request_id, *, employee_id, days, absence_type, now):
        self._rows = [a for a in self._rows if a.source_request_id != int(request_id)]
        written = 0
        for d in days:
            self._rows.append(
                AbsenceDay(
                    absence_id=self._next_id,
                    employee_id=int(employee_id),
                    absence_date=d,
                    absence_type=absence_type,
                    source_request_id=int(request_id),
                )
            )
            self._next_id += 1
            written += 1
        return written

    def list_for_employee(self, employee_id, *, date_from=None, date_to=None):
        rows = [
            a
            for a in self._rows
            if a.employee_id == int(employee_id)
            and (date_from is None or a.absence_date >= date_from)
            and (date_to is None or a.absence_date <= date_to)
        ]
        return sorted(rows, key=lambda a: (a.absence_date, a.absence_id))


class FakeAudit:
    def __init__(self):
        self._mutex = threading.Lock()
        self.entries: list[AuditEntry] = []

    def record(self, *, entity_type, entity_id, action, old_values, new_values, performed_by, now):
        with self._mutex:
            entry = AuditEntry(
                audit_id=len(self.entries) + 1,
                entity_type=entity_type,
                entity_id=str(entity_id),
                action=action,
                old_values=old_values,
                new_values=new_values,
                performed_by=performed_by,
                performed_at=now,
            )
            self.entries.append(entry)
            return entry.audit_id

    def list_for_entity(self, entity_type, entity_id):
        with self._mutex:
            return [e for e in self.entries if e.entity_type == entity_type and e.entity_id == str(entity_id)]


EMPLOYEES = [
    Employee(employee_id=1, full_name="Laura Martin", department="HR"),
    Employee(employee_id=2, full_name="Carlos Perez", department="IT"),
    Employee(employee_id=3, full_name="Ana Gomez", department="IT", manager_employee_id=2),
    Employee(employee_id=4, full_name="Jorge Ruiz", department="IT", manager_employee_id=2),
    Employee(employee_id=5, full_name="Marta Diaz", department="Sales", manager_employee_id=1, is_active=False),
]


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def employees():
    return FakeEmployees(EMPLOYEES)


@pytest.fixture
def policies():
    return FakePolicies()


@pytest.fixture
def balances():
    return FakeBalances()


@pytest.fixture
def requests_repo():
    return FakeRequests()


@pytest.fixture
def absences_repo():
    return FakeAbsences()


@pytest.fixture
def audit_repo():
    return FakeAudit()


@pytest.fixture
def standard_policy(policies):
    pid = policies.create(
        name="Standard 2026",
        year=2026,
        accrual_type=AccrualType.ANNUAL,
        total_days_per_year=Decimal("22"),
        carry_over_max_days=Decimal("5"),
        now=NOW,
    )
    return policies.get_by_id(pid)


@pytest.fixture
def lock():
    return ThreadingKeyLock(timeout=2)


@pytest.fixture
def container(employees, policies, balances, requests_repo, absences_repo, audit_repo, lock, clock):
    return assemble(
        employees_repo=employees,
        policies_repo=policies,
        balances_repo=balances,
        requests_repo=requests_repo,
        absences_repo=absences_repo,
        audit_repo=audit_repo,
        holidays=StaticHolidayCalendar(HOLIDAYS),
        lock=lock,
        authority=ManagerApprovalAuthority([1]),
        clock=clock,
    )
