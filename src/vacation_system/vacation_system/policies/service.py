from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..audit.service import AuditTrail
from ..balances.repository import BalanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_non_negative, require_positive
from ..core.constants import AUDIT_POLICY
from ..core.enums import AccrualType, AuditAction
from ..core.exceptions import NotFound, PolicyInUse, ValidationError
from .model import VacationPolicy
from .repository import PolicyRepository

logger = logging.getLogger(__name__)

# Changing any of these would alter allocations already granted from the policy.
_STRUCTURAL_FIELDS = ("year", "accrual_type", "total_days_per_year", "carry_over_max_days")
_UPDATABLE_FIELDS = ("name",) + _STRUCTURAL_FIELDS


def _parse_accrual_type(value) -> AccrualType:
    if isinstance(value, AccrualType):
        return value
    try:
        return AccrualType(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError("Accrual type must be ANNUAL or MONTHLY")


def _parse_year(value) -> int:
    try:
        year = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Year must be a number")
    if year < 1900 or year > 9999:
        raise ValidationError("Year is out of range")
    return year


class PolicyService:
    def __init__(
        self,
        policies: PolicyRepository,
        balances: BalanceRepository,
        *,
        audit: AuditTrail,
        clock: Callable[[], datetime] = now_local,
    ):
        self._policies = policies
        self._balances = balances
        self._audit = audit
        self._clock = clock

    def get_policy(self, policy_id: int) -> VacationPolicy:
        policy = self._policies.get_by_id(int(policy_id))
        if not policy:
            raise NotFound("policy", int(policy_id))
        return policy

    def list_policies(self, *, year: Optional[int] = None) -> Sequence[VacationPolicy]:
        return self._policies.list_policies(year=year)

    def create_policy(
        self,
        *,
        name: str,
        year,
        accrual_type=AccrualType.ANNUAL,
        total_days_per_year,
        carry_over_max_days=0,
        performed_by: Optional[int] = None,
    ) -> VacationPolicy:
        name = require_non_empty(name, "Name")
        year = _parse_year(year)
        accrual = _parse_accrual_type(accrual_type)
        total = require_positive(total_days_per_year, "Total days per year")
        carry_over = require_non_negative(carry_over_max_days, "Carry-over max days")

        if self._policies.name_taken(name=name, year=year):
            raise ValidationError(f"A policy named '{name}' already exists for {year}")

        policy_id = self._policies.create(
            name=name,
            year=year,
            accrual_type=accrual,
            total_days_per_year=total,
            carry_over_max_days=carry_over,
            now=self._clock(),
        )
        logger.info("created vacation policy %s (%s, %s days)", policy_id, year, total)
        policy = self.get_policy(policy_id)
        self._audit.record(AUDIT_POLICY, policy_id, AuditAction.CREATE, performed_by=performed_by, new=policy)
        return policy

    def update_policy(
        self,
        policy_id: int,
        changes: Mapping[str, Any],
        *,
        performed_by: Optional[int] = None,
    ) -> VacationPolicy:
        """Partial update.

        Renaming is always allowed. Structural fields are frozen once a
        balance references the policy.
        """
        unknown = set(changes) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown policy fields: {', '.join(sorted(unknown))}")

        current = self.get_policy(policy_id)
        values = {}
        if changes.get("name") is not None:
            values["name"] = require_non_empty(changes["name"], "Name")
        if changes.get("year") is not None:
            values["year"] = _parse_year(changes["year"])
        if changes.get("accrual_type") is not None:
            values["accrual_type"] = _parse_accrual_type(changes["accrual_type"])
        if changes.get("total_days_per_year") is not None:
            values["total_days_per_year"] = require_positive(changes["total_days_per_year"], "Total days per year")
        if changes.get("carry_over_max_days") is not None:
            values["carry_over_max_days"] = require_non_negative(changes["carry_over_max_days"], "Carry-over max days")

        structural = [f for f in _STRUCTURAL_FIELDS if f in values and values[f] != getattr(current, f)]
        if structural and self._balances.count_by_policy(current.policy_id) > 0:
            raise PolicyInUse(current.policy_id)

        updated = replace(current, **values, updated_at=self._clock())
        if (updated.name, updated.year) != (current.name, current.year) and self._policies.name_taken(
            name=updated.name, year=updated.year, exclude_policy_id=current.policy_id
        ):
            raise ValidationError(f"A policy named '{updated.name}' already exists for {updated.year}")

        if not self._policies.update(updated):
            raise NotFound("policy", current.policy_id)
        logger.info("updated vacation policy %s (%s)", current.policy_id, ", ".join(sorted(values)) or "no changes")
        policy = self.get_policy(current.policy_id)
        self._audit.record(
            AUDIT_POLICY, policy.policy_id, AuditAction.UPDATE, performed_by=performed_by, old=current, new=policy
        )
        return policy

    def delete_policy(self, policy_id: int, *, performed_by: Optional[int] = None) -> None:
        policy = self.get_policy(policy_id)
        if self._balances.count_by_policy(policy.policy_id) > 0:
            raise PolicyInUse(policy.policy_id)
        if not self._policies.delete(policy.policy_id):
            raise NotFound("policy", policy.policy_id)
        logger.info("deleted vacation policy %s", policy.policy_id)
        self._audit.record(AUDIT_POLICY, policy.policy_id, AuditAction.DELETE, performed_by=performed_by, old=policy)
