from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ..core.constants import FULL_DAY


@dataclass(frozen=True)
class RequestDay:
    """One calendar day of a requested range."""

    date: date
    is_holiday_or_weekend: bool
    day_fraction: Decimal = FULL_DAY

    @property
    def counted_days(self) -> Decimal:
        return Decimal("0") if self.is_holiday_or_weekend else self.day_fraction
