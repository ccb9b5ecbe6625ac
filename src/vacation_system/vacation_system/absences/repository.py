from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import VacationType
from .model import AbsenceDay


class AbsenceRepository(Protocol):
    """Per-day absence calendar, keyed by the request that produced each row."""

    def replace_for_request(
        self,
        request_id: int,
        *,
        employee_id: int,
        days: Iterable[date],
        absence_type: VacationType,
        now: datetime,
    ) -> int:
        """Drop the request's rows and write `days` in their place. Returns rows written."""
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Sequence[AbsenceDay]:
        raise NotImplementedError
