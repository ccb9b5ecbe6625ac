from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Sequence

from .model import VacationBalance


class BalanceRepository(Protocol):
    """Persistence for per employee/year balances.

    Mutations are conditional so the store itself refuses to break
    0 <= used_days <= allocated_days, whatever the caller read before.
    """

    def get(self, employee_id: int, year: int) -> Optional[VacationBalance]:
        raise NotImplementedError

    def list_for_year(self, year: int, *, employee_ids: Optional[Iterable[int]] = None) -> Sequence[VacationBalance]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        policy_id: int,
        year: int,
        allocated_days: Decimal,
        now: datetime,
    ) -> bool:
        """Insert a balance with used_days=0; False when (employee, year) already exists."""

        raise NotImplementedError

    def add_used(self, *, employee_id: int, year: int, days: Decimal, now: datetime) -> bool:
        """used_days += days, only if the result stays within allocated_days."""

        raise NotImplementedError

    def subtract_used(self, *, employee_id: int, year: int, days: Decimal, now: datetime) -> bool:
        """used_days -= days, floored at 0."""

        raise NotImplementedError

    def set_used(self, *, employee_id: int, year: int, used_days: Decimal, now: datetime) -> bool:
        """used_days = value, only if 0 <= value <= allocated_days."""

        raise NotImplementedError

    def count_by_policy(self, policy_id: int) -> int:
        raise NotImplementedError
