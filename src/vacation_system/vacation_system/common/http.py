from __future__ import annotations

from datetime import date
from typing import Any, Optional

from flask import request

from ..core.exceptions import AuthorizationError, ValidationError
from .datetime_utils import parse_iso_date

EMPLOYEE_HEADER = "X-Employee-Id"


def current_employee_id() -> int:
    """Caller identity, set by the upstream authentication layer."""
    raw = (request.headers.get(EMPLOYEE_HEADER) or "").strip()
    if not raw:
        raise AuthorizationError(f"Missing {EMPLOYEE_HEADER} header")
    try:
        return int(raw)
    except ValueError:
        raise AuthorizationError(f"Invalid {EMPLOYEE_HEADER} header")


def json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def to_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_int(value, field_name)


def to_date(value: Any, field_name: str) -> date:
    try:
        return parse_iso_date(str(value or "").strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def optional_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or not str(value).strip():
        return None
    return to_date(value, field_name)


def require_admin(authority) -> int:
    """Caller identity, which must be one of the configured HR administrators."""
    employee_id = current_employee_id()
    if not authority.is_admin(employee_id):
        raise AuthorizationError(f"Employee {employee_id} cannot manage vacation settings")
    return employee_id
