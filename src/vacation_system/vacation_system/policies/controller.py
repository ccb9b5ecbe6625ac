from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_employee_id, json_body, optional_int, require_admin
from ..common.serialization import to_json
from ..container import Container
from ..core.exceptions import ValidationError

# Returned by GET; a client may send them back unchanged on PUT.
_READ_ONLY_FIELDS = ("created_at", "updated_at")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/vacation/policies", methods=["GET"], endpoint="list_policies")
    def list_policies():
        current_employee_id()
        year = optional_int(request.args.get("year"), "year")
        policies = container.policy_service.list_policies(year=year)
        return jsonify(to_json(list(policies)))

    @app.route("/api/vacation/policies", methods=["POST"], endpoint="create_policy")
    def create_policy():
        actor_id = require_admin(container.authority)
        body = json_body()
        policy = container.policy_service.create_policy(
            name=body.get("name", ""),
            year=body.get("year"),
            accrual_type=body.get("accrual_type", "ANNUAL"),
            total_days_per_year=body.get("total_days_per_year"),
            carry_over_max_days=body.get("carry_over_max_days", 0),
            performed_by=actor_id,
        )
        return jsonify(to_json(policy)), 201

    @app.route("/api/vacation/policies/<int:policy_id>", methods=["GET"], endpoint="get_policy")
    def get_policy(policy_id: int):
        current_employee_id()
        return jsonify(to_json(container.policy_service.get_policy(policy_id)))

    @app.route("/api/vacation/policies/<int:policy_id>", methods=["PUT"], endpoint="update_policy")
    def update_policy(policy_id: int):
        actor_id = require_admin(container.authority)
        changes = dict(json_body())
        body_id = optional_int(changes.pop("policy_id", None), "policy_id")
        if body_id is not None and body_id != policy_id:
            raise ValidationError(f"policy_id {body_id} does not match the URL ({policy_id})")
        for field in _READ_ONLY_FIELDS:
            changes.pop(field, None)

        policy = container.policy_service.update_policy(policy_id, changes, performed_by=actor_id)
        return jsonify(to_json(policy))

    @app.route("/api/vacation/policies/<int:policy_id>", methods=["DELETE"], endpoint="delete_policy")
    def delete_policy(policy_id: int):
        actor_id = require_admin(container.authority)
        container.policy_service.delete_policy(policy_id, performed_by=actor_id)
        return "", 204
