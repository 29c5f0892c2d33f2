from __future__ import annotations

from flask import Flask

from ..common.web import current_actor, json_body, ok, require_field, require_role
from ..container import Container
from ..core.enums import Role
from .model import ReportedCoordinates

API_PREFIX = "/api/v1/attendance"


def register(app: Flask, container: Container) -> None:
    checkins = container.checkin_service

    @app.route(f"{API_PREFIX}/sessions/<int:session_id>/checkin", methods=["POST"], endpoint="submit_check_in")
    def submit_check_in(session_id: int):
        actor = require_role(current_actor(), Role.STUDENT)
        data = json_body()

        reported = ReportedCoordinates.parse(
            require_field(data, "latitude"),
            require_field(data, "longitude"),
            data.get("accuracy"),
        )
        checkin = checkins.submit_check_in(session_id=session_id, student_id=actor.user_id, reported=reported)
        return ok(checkin.to_dict(), 201)

    @app.route(f"{API_PREFIX}/sessions/<int:session_id>/checkins", methods=["GET"], endpoint="session_check_ins")
    def session_check_ins(session_id: int):
        actor = require_role(current_actor(), Role.FACULTY, Role.ADMIN)
        return ok([c.to_dict() for c in checkins.list_session_check_ins(session_id=session_id, actor=actor)])

    @app.route(f"{API_PREFIX}/my-checkins", methods=["GET"], endpoint="my_check_ins")
    def my_check_ins():
        actor = require_role(current_actor(), Role.STUDENT)
        return ok([c.to_dict() for c in checkins.list_student_check_ins(actor.user_id)])

    @app.route(f"{API_PREFIX}/sections/<int:section_id>/flagged", methods=["GET"], endpoint="flagged_check_ins")
    def flagged_check_ins(section_id: int):
        actor = require_role(current_actor(), Role.FACULTY, Role.ADMIN)
        return ok([c.to_dict() for c in checkins.list_flagged_check_ins(section_id=section_id, actor=actor)])
