from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AccrualType
from .model import VacationPolicy


class PolicyRepository(Protocol):
    def get_by_id(self, policy_id: int) -> Optional[VacationPolicy]:
        raise NotImplementedError

    def list_policies(self, *, year: Optional[int] = None) -> Sequence[VacationPolicy]:
        """Policies ordered by year (newest first) then name."""

        raise NotImplementedError

    def default_for_year(self, year: int) -> Optional[VacationPolicy]:
        """The policy used for first allocations in `year` (lowest policy id)."""

        raise NotImplementedError

    def name_taken(self, *, name: str, year: int, exclude_policy_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        year: int,
        accrual_type: AccrualType,
        total_days_per_year: Decimal,
        carry_over_max_days: Decimal,
        now: datetime,
    ) -> int:
        raise NotImplementedError

    def update(self, policy: VacationPolicy) -> bool:
        raise NotImplementedError

    def delete(self, policy_id: int) -> bool:
        raise NotImplementedError
