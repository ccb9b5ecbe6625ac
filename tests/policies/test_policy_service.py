from decimal import Decimal

import pytest

from src.vacation_system.vacation_system.core.enums import AccrualType
from src.vacation_system.vacation_system.core.exceptions import NotFound, PolicyInUse, ValidationError
from src.vacation_system.vacation_system.audit.service import AuditTrail
from src.vacation_system.vacation_system.core.constants import AUDIT_POLICY
from src.vacation_system.vacation_system.core.enums import AuditAction
from src.vacation_system.vacation_system.policies.service import PolicyService


@pytest.fixture
def service(policies, balances, audit_repo, clock):
    return PolicyService(policies, balances, audit=AuditTrail(audit_repo, clock=clock), clock=clock)


def test_create_and_get_policy(service):
    policy = service.create_policy(
        name="  Standard 2026 ",
        year=2026,
        accrual_type="monthly",
        total_days_per_year="22",
        carry_over_max_days=5,
    )

    assert policy.name == "Standard 2026"
    assert policy.accrual_type == AccrualType.MONTHLY
    assert policy.total_days_per_year == Decimal("22")
    assert service.get_policy(policy.policy_id) == policy


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(name="", year=2026, total_days_per_year=22),
        dict(name="X", year=2026, total_days_per_year=0),
        dict(name="X", year=2026, total_days_per_year=22, carry_over_max_days=-1),
        dict(name="X", year=2026, total_days_per_year=22, accrual_type="weekly"),
        dict(name="X", year="next", total_days_per_year=22),
        dict(name="X", year=2026, total_days_per_year="NaN"),
        dict(name="X", year=2026, total_days_per_year="Infinity"),
        dict(name="X", year=2026, total_days_per_year=float("inf")),
        dict(name="X", year=2026, total_days_per_year=22, carry_over_max_days="nan"),
    ],
)
def test_create_policy_rejects_invalid_input(service, kwargs):
    with pytest.raises(ValidationError):
        service.create_policy(**kwargs)


def test_duplicate_name_in_same_year_is_rejected(service):
    service.create_policy(name="Standard", year=2026, total_days_per_year=22)
    service.create_policy(name="Standard", year=2027, total_days_per_year=22)

    with pytest.raises(ValidationError):
        service.create_policy(name="Standard", year=2026, total_days_per_year=25)


def test_get_missing_policy_raises_not_found(service):
    with pytest.raises(NotFound) as exc:
        service.get_policy(99)
    assert exc.value.entity_kind == "policy"


def test_list_policies_orders_by_year_desc_then_name(service):
    service.create_policy(name="B", year=2026, total_days_per_year=22)
    service.create_policy(name="A", year=2026, total_days_per_year=22)
    service.create_policy(name="C", year=2027, total_days_per_year=22)

    assert [(p.year, p.name) for p in service.list_policies()] == [(2027, "C"), (2026, "A"), (2026, "B")]
    assert [p.name for p in service.list_policies(year=2026)] == ["A", "B"]


def test_update_unreferenced_policy_changes_structure(service):
    policy = service.create_policy(name="Standard", year=2026, total_days_per_year=22)

    updated = service.update_policy(policy.policy_id, {"total_days_per_year": 25, "carry_over_max_days": 3})

    assert updated.total_days_per_year == Decimal("25")
    assert updated.carry_over_max_days == Decimal("3")


def test_referenced_policy_allows_rename_but_not_structural_change(service, balances):
    policy = service.create_policy(name="Standard", year=2026, total_days_per_year=22)
    balances.put(employee_id=3, year=2026, allocated="22", policy_id=policy.policy_id)

    assert service.update_policy(policy.policy_id, {"name": "Standard (legacy)"}).name == "Standard (legacy)"
    with pytest.raises(PolicyInUse):
        service.update_policy(policy.policy_id, {"total_days_per_year": 30})
    # Same value is not a change
    assert service.update_policy(policy.policy_id, {"total_days_per_year": "22"}).total_days_per_year == Decimal("22")


def test_update_rejects_unknown_fields(service):
    policy = service.create_policy(name="Standard", year=2026, total_days_per_year=22)
    with pytest.raises(ValidationError):
        service.update_policy(policy.policy_id, {"policy_id": 7})
    with pytest.raises(ValidationError):
        service.update_policy(policy.policy_id, {"created_at": "2026-01-01T00:00:00"})


def test_delete_policy(service, balances):
    free = service.create_policy(name="Free", year=2026, total_days_per_year=22)
    used = service.create_policy(name="Used", year=2026, total_days_per_year=22)
    balances.put(employee_id=3, year=2026, allocated="22", policy_id=used.policy_id)

    service.delete_policy(free.policy_id)
    with pytest.raises(NotFound):
        service.get_policy(free.policy_id)
    with pytest.raises(PolicyInUse):
        service.delete_policy(used.policy_id)


def test_policy_changes_are_audited_with_actor(service, audit_repo):
    policy = service.create_policy(name="Standard", year=2026, total_days_per_year=22, performed_by=1)
    service.update_policy(policy.policy_id, {"total_days_per_year": 25}, performed_by=1)
    service.delete_policy(policy.policy_id, performed_by=1)

    history = audit_repo.list_for_entity(AUDIT_POLICY, str(policy.policy_id))
    assert [e.action for e in history] == [AuditAction.CREATE, AuditAction.UPDATE, AuditAction.DELETE]
    assert {e.performed_by for e in history} == {1}
    assert history[0].old_values is None
    assert history[1].old_values["total_days_per_year"] == 22
    assert history[1].new_values["total_days_per_year"] == 25
    assert history[2].old_values["name"] == "Standard"


def test_rejected_change_leaves_no_audit_entry(service, balances, audit_repo):
    policy = service.create_policy(name="Standard", year=2026, total_days_per_year=22)
    balances.put(employee_id=3, year=2026, allocated="22", policy_id=policy.policy_id)

    with pytest.raises(PolicyInUse):
        service.delete_policy(policy.policy_id, performed_by=1)
    assert [e.action for e in audit_repo.list_for_entity(AUDIT_POLICY, str(policy.policy_id))] == [AuditAction.CREATE]
