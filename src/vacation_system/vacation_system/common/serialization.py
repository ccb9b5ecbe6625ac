from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


def to_json(value: Any) -> Any:
    """Convert domain objects into JSON-friendly structures.

    Dataclasses become dicts (including read-only properties listed in
    `extra`), Decimals become floats, dates become ISO strings.
    """
    if is_dataclass(value) and not isinstance(value, type):
        data = {f.name: to_json(getattr(value, f.name)) for f in fields(value)}
        for name in _EXTRA_PROPERTIES.get(type(value).__name__, ()):
            data[name] = to_json(getattr(value, name))
        return data
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json(v) for v in value]
    return value


_EXTRA_PROPERTIES = {
    "VacationBalance": ("remaining_days",),
}
