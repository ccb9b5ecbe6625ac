from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import VacationType


@dataclass(frozen=True)
class AbsenceDay:
    """A working day an employee is away, derived from an approved request."""

    employee_id: int
    absence_date: date
    absence_type: VacationType
    source_request_id: int
    absence_id: Optional[int] = None
