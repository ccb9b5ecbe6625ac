from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""

    retryable = False


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class InvalidRange(DomainError):
    """Raised when a date range ends before it starts."""

    def __init__(self, start, end):
        super().__init__(f"Invalid date range: {start} > {end}")
        self.start = start
        self.end = end


class ValidationFailed(DomainError):
    """Raised when a request cannot be created or submitted.

    Carries the blocking errors produced by the request validator.
    """

    def __init__(self, errors: Sequence[str]):
        self.errors = tuple(errors)
        super().__init__("; ".join(self.errors) or "Validation failed")


class InsufficientBalance(DomainError):
    def __init__(self, employee_id: int, year: int, requested, available):
        super().__init__(
            f"Insufficient balance for employee {employee_id} in {year}: "
            f"requested {requested}, available {available}"
        )
        self.employee_id = employee_id
        self.year = year
        self.requested = requested
        self.available = available


class InvalidTransition(DomainError):
    def __init__(self, current, attempted):
        current_s = getattr(current, "value", current)
        attempted_s = getattr(attempted, "value", attempted)
        super().__init__(f"Cannot move request from {current_s} to {attempted_s}")
        self.current = current
        self.attempted = attempted


class CommentRequired(DomainError):
    def __init__(self, message: str = "A comment is required to reject a request"):
        super().__init__(message)


class NotFound(DomainError):
    def __init__(self, entity_kind: str, key):
        super().__init__(f"{entity_kind} not found: {key}")
        self.entity_kind = entity_kind
        self.key = key


class PolicyInUse(DomainError):
    def __init__(self, policy_id: int):
        super().__init__(f"Policy {policy_id} is referenced by existing balances")
        self.policy_id = policy_id


class Busy(DomainError):
    """Lock contention on a balance key. Callers may retry with backoff."""

    retryable = True

    def __init__(self, key: str):
        super().__init__(f"Resource busy, retry later: {key}")
        self.key = key
