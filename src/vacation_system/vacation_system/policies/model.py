from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AccrualType


@dataclass(frozen=True)
class VacationPolicy:
    policy_id: int
    name: str
    year: int
    accrual_type: AccrualType
    total_days_per_year: Decimal
    carry_over_max_days: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def allocation_for(self, previous_remaining: Optional[Decimal]) -> Decimal:
        """Base allocation plus the capped carry-over of last year's remaining days."""
        carry_over = Decimal("0")
        if previous_remaining is not None and previous_remaining > 0:
            carry_over = min(previous_remaining, self.carry_over_max_days)
        return self.total_days_per_year + carry_over
