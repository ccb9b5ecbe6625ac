from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeDirectory(Protocol):
    """Read-only employee directory.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self, *, department: Optional[str] = None) -> Sequence[Employee]:
        """Active employees ordered by full name, optionally for one department."""

        raise NotImplementedError
