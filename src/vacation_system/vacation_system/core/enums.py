from __future__ import annotations

from enum import Enum


class AccrualType(str, Enum):
    """How a policy grants its yearly days."""

    ANNUAL = "ANNUAL"
    MONTHLY = "MONTHLY"


class VacationType(str, Enum):
    VACATION = "VACATION"
    PERSONAL = "PERSONAL"
    OTHER = "OTHER"


class RequestStatus(str, Enum):
    """Lifecycle states of a vacation request, as stored in the database."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


# Requests that hold days on the ledger and block overlapping ranges.
RESERVING_STATUSES = frozenset({RequestStatus.SUBMITTED, RequestStatus.APPROVED})

ALLOWED_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.DRAFT: frozenset({RequestStatus.SUBMITTED, RequestStatus.CANCELLED}),
    RequestStatus.SUBMITTED: frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED, RequestStatus.CANCELLED}),
    RequestStatus.APPROVED: frozenset(),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.CANCELLED: frozenset(),
}


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    BULK_ASSIGN = "BULK_ASSIGN"
    RECALCULATE = "RECALCULATE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
