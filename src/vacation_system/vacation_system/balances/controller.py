from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_employee_id, json_body, optional_int, require_admin, to_int
from ..common.serialization import to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _year(value) -> int:
        year = optional_int(value, "year")
        return year if year is not None else container.clock().year

    @app.route("/api/vacation/balance", methods=["GET"], endpoint="get_balance")
    def get_balance():
        viewer_id = current_employee_id()
        employee_id = optional_int(request.args.get("employee_id"), "employee_id")
        if employee_id is None:
            employee_id = viewer_id
        container.approval_workflow.ensure_can_view(viewer_id, employee_id)
        balance = container.balance_ledger.get_balance(employee_id, _year(request.args.get("year")))
        return jsonify(to_json(balance))

    @app.route("/api/vacation/balance/team", methods=["GET"], endpoint="team_balances")
    def team_balances():
        viewer_id = current_employee_id()
        department = (request.args.get("department") or "").strip() or None
        rows = container.balance_ledger.get_team_balances(department, _year(request.args.get("year")))
        if not container.authority.is_admin(viewer_id):
            # Managers see their direct reports only.
            rows = [
                r
                for r in rows
                if r.employee_id != viewer_id and container.approval_workflow.can_view(viewer_id, r.employee_id)
            ]
        return jsonify(to_json(list(rows)))

    @app.route("/api/vacation/balance/bulk-assign", methods=["POST"], endpoint="bulk_assign")
    def bulk_assign():
        actor_id = require_admin(container.authority)
        body = json_body()
        result = container.balance_ledger.bulk_assign(
            to_int(body.get("policy_id"), "policy_id"), _year(body.get("year")), performed_by=actor_id
        )
        return jsonify(to_json(result))

    @app.route("/api/vacation/balance/recalculate", methods=["POST"], endpoint="recalculate_balance")
    def recalculate_balance():
        actor_id = require_admin(container.authority)
        body = json_body()
        balance = container.balance_ledger.recalculate(
            to_int(body.get("employee_id"), "employee_id"), _year(body.get("year")), performed_by=actor_id
        )
        return jsonify(to_json(balance))
