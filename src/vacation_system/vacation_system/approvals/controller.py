from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_employee_id, json_body, optional_date, optional_int
from ..common.serialization import to_json
from ..container import Container
from ..core.enums import RequestStatus
from ..core.exceptions import ValidationError
from .model import PendingFilter


def register(app: Flask, container: Container) -> None:
    @app.route("/api/vacation/requests/pending", methods=["GET"], endpoint="pending_requests")
    def pending_requests():
        args = request.args
        try:
            status = RequestStatus((args.get("status") or RequestStatus.SUBMITTED.value).strip().upper())
        except ValueError:
            raise ValidationError(f"Unknown status: {args.get('status')}")

        filters = PendingFilter(
            employee_id=optional_int(args.get("employee_id"), "employee_id"),
            department=(args.get("department") or "").strip() or None,
            date_from=optional_date(args.get("date_from"), "date_from"),
            date_to=optional_date(args.get("date_to"), "date_to"),
            status=status,
        )
        rows = container.approval_workflow.list_pending(filters, approver_id=current_employee_id())
        return jsonify(to_json(list(rows)))

    @app.route("/api/vacation/requests/<int:request_id>/approve", methods=["POST"], endpoint="approve_request")
    def approve_request(request_id: int):
        body = json_body()
        req = container.approval_workflow.approve(current_employee_id(), request_id, body.get("comment"))
        return jsonify(to_json(req))

    @app.route("/api/vacation/requests/<int:request_id>/reject", methods=["POST"], endpoint="reject_request")
    def reject_request(request_id: int):
        body = json_body()
        req = container.approval_workflow.reject(current_employee_id(), request_id, body.get("comment"))
        return jsonify(to_json(req))
