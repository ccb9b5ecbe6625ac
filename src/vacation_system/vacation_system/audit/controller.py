from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import require_admin
from ..common.serialization import to_json
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/vacation/audit", methods=["GET"], endpoint="audit_history")
    def audit_history():
        require_admin(container.authority)
        entity_type = (request.args.get("entity_type") or "").strip()
        entity_id = (request.args.get("entity_id") or "").strip()
        if not entity_type or not entity_id:
            raise ValidationError("entity_type and entity_id are required")
        return jsonify(to_json(list(container.audit_trail.history(entity_type, entity_id))))
