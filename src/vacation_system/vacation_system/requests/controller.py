from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_employee_id, json_body, optional_date, to_date
from ..common.serialization import to_json
from ..container import Container
from ..core.enums import RequestStatus
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _status(value):
        v = (value or "").strip().upper()
        if not v:
            return None
        try:
            return RequestStatus(v)
        except ValueError:
            raise ValidationError(f"Unknown status: {value}")

    @app.route("/api/vacation/requests/validate", methods=["POST"], endpoint="validate_request")
    def validate_request():
        body = json_body()
        result = container.request_service.validate(
            current_employee_id(),
            to_date(body.get("start_date"), "start_date"),
            to_date(body.get("end_date"), "end_date"),
        )
        return jsonify(to_json(result))

    @app.route("/api/vacation/requests", methods=["POST"], endpoint="create_request")
    def create_request():
        body = json_body()
        req = container.request_service.create(
            employee_id=current_employee_id(),
            start_date=to_date(body.get("start_date"), "start_date"),
            end_date=to_date(body.get("end_date"), "end_date"),
            type=body.get("type", "VACATION"),
        )
        return jsonify(to_json(req)), 201

    @app.route("/api/vacation/requests/<int:request_id>/submit", methods=["POST"], endpoint="submit_request")
    def submit_request(request_id: int):
        req = container.request_service.submit(request_id, employee_id=current_employee_id())
        return jsonify(to_json(req))

    @app.route("/api/vacation/requests/<int:request_id>/cancel", methods=["POST"], endpoint="cancel_request")
    def cancel_request(request_id: int):
        req = container.request_service.cancel(request_id, employee_id=current_employee_id())
        return jsonify(to_json(req))

    @app.route("/api/vacation/requests/<int:request_id>/days", methods=["GET"], endpoint="request_days")
    def request_days(request_id: int):
        req = container.request_service.get_request(request_id)
        container.approval_workflow.ensure_can_view(current_employee_id(), req.employee_id)
        return jsonify(to_json(container.request_service.request_days(request_id)))

    @app.route("/api/vacation/requests/mine", methods=["GET"], endpoint="my_requests")
    def my_requests():
        rows = container.request_service.list_mine(current_employee_id(), status=_status(request.args.get("status")))
        return jsonify(to_json(list(rows)))

    @app.route("/api/vacation/absences/mine", methods=["GET"], endpoint="my_absences")
    def my_absences():
        rows = container.request_service.list_absences(
            current_employee_id(),
            date_from=optional_date(request.args.get("date_from"), "date_from"),
            date_to=optional_date(request.args.get("date_to"), "date_to"),
        )
        return jsonify(to_json(list(rows)))
