from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee as seen by the vacation engine.

    Note: Plain data object, the directory that produces it lives outside the engine.
    """

    employee_id: int
    full_name: str
    department: Optional[str] = None
    manager_employee_id: Optional[int] = None
    is_active: bool = True
    employee_code: str = ""
