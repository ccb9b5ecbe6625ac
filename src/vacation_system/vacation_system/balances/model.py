from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class VacationBalance:
    balance_id: int
    employee_id: int
    policy_id: int
    year: int
    allocated_days: Decimal
    used_days: Decimal
    updated_at: Optional[datetime] = None

    @property
    def remaining_days(self) -> Decimal:
        return self.allocated_days - self.used_days


@dataclass(frozen=True)
class BulkAssignResult:
    created: int
    skipped: int
    total: int


@dataclass(frozen=True)
class TeamBalanceRow:
    """Read model for the team balance screen."""

    employee_id: int
    full_name: str
    department: Optional[str]
    year: int
    allocated_days: Decimal
    used_days: Decimal
    remaining_days: Decimal
    policy_name: str
