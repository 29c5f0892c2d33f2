from __future__ import annotations

from flask import Flask, request

from ..common.web import current_actor, json_body, ok, require_field, require_int, require_role
from ..container import Container
from ..core.enums import ExcuseStatus, ReviewDecision, Role
from ..core.exceptions import ValidationError

API_PREFIX = "/api/v1/attendance"


def register(app: Flask, container: Container) -> None:
    excuses = container.excuse_service

    def _parse_status(value: str | None) -> ExcuseStatus | None:
        v = (value or "").strip().lower()
        if not v:
            return None
        try:
            return ExcuseStatus(v)
        except ValueError:
            raise ValidationError("status must be pending, approved or rejected")

    def _notes() -> str | None:
        data = request.get_json(silent=True) or {}
        notes = data.get("notes") if isinstance(data, dict) else None
        return str(notes) if notes is not None else None

    @app.route(f"{API_PREFIX}/excuse-requests", methods=["POST"], endpoint="create_excuse_request")
    def create_excuse_request():
        actor = require_role(current_actor(), Role.STUDENT)
        data = json_body()

        created = excuses.create_request(
            student_id=actor.user_id,
            session_id=require_int(require_field(data, "sessionId"), "sessionId"),
            reason=str(data.get("reason") or ""),
            document_ref=data.get("documentUrl"),
        )
        return ok(created.to_dict(), 201)

    @app.route(f"{API_PREFIX}/excuse-requests", methods=["GET"], endpoint="list_excuse_requests")
    def list_excuse_requests():
        actor = require_role(current_actor(), Role.FACULTY, Role.ADMIN)
        rows = excuses.list_requests_for_reviewer(actor=actor, status=_parse_status(request.args.get("status")))
        return ok([r.to_dict() for r in rows])

    @app.route(f"{API_PREFIX}/excuse-requests/mine", methods=["GET"], endpoint="my_excuse_requests")
    def my_excuse_requests():
        actor = require_role(current_actor(), Role.STUDENT)
        return ok([r.to_dict() for r in excuses.list_my_requests(student_id=actor.user_id)])

    @app.route(f"{API_PREFIX}/excuse-requests/<int:request_id>/approve", methods=["PUT"], endpoint="approve_excuse")
    def approve_excuse(request_id: int):
        actor = require_role(current_actor(), Role.FACULTY, Role.ADMIN)
        reviewed = excuses.review(request_id=request_id, actor=actor, decision=ReviewDecision.APPROVE, notes=_notes())
        return ok(reviewed.to_dict())

    @app.route(f"{API_PREFIX}/excuse-requests/<int:request_id>/reject", methods=["PUT"], endpoint="reject_excuse")
    def reject_excuse(request_id: int):
        actor = require_role(current_actor(), Role.FACULTY, Role.ADMIN)
        reviewed = excuses.review(request_id=request_id, actor=actor, decision=ReviewDecision.REJECT, notes=_notes())
        return ok(reviewed.to_dict())
