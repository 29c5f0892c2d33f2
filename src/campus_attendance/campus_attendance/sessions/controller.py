from __future__ import annotations

import io

import qrcode
from flask import Flask, send_file

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.geo import Coordinate
from ..common.web import current_actor, json_body, ok, require_field, require_int, require_role
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError

API_PREFIX = "/api/v1/attendance"


def register(app: Flask, container: Container) -> None:
    sessions = container.session_service

    def _session_payload(session, actor) -> dict:
        data = session.to_dict()
        # Backup codes are for the instructor's screen, not for students' clients.
        if not sessions.can_manage_session(actor, session):
            data.pop("backupCode", None)
        return data

    @app.route(f"{API_PREFIX}/sessions", methods=["POST"], endpoint="open_session")
    def open_session():
        actor = require_role(current_actor(), Role.FACULTY, Role.ADMIN)
        data = json_body()

        radius = data.get("geofenceRadius")
        session = sessions.open_session(
            actor=actor,
            section_id=require_int(require_field(data, "sectionId"), "sectionId"),
            session_date=parse_iso_date(str(require_field(data, "date"))),
            start_time=parse_hhmm(str(require_field(data, "startTime"))),
            end_time=parse_hhmm(str(require_field(data, "endTime"))),
            anchor=Coordinate.parse(require_field(data, "latitude"), require_field(data, "longitude")),
            geofence_radius_m=None if radius in (None, "") else radius,
        )
        return ok(_session_payload(session, actor), 201)

    @app.route(f"{API_PREFIX}/sessions/<int:session_id>", methods=["GET"], endpoint="get_session")
    def get_session(session_id: int):
        actor = current_actor()
        return ok(_session_payload(sessions.get_session(session_id), actor))

    @app.route(f"{API_PREFIX}/sessions/<int:session_id>/close", methods=["PUT"], endpoint="close_session")
    def close_session(session_id: int):
        actor = require_role(current_actor(), Role.FACULTY, Role.ADMIN)
        session = sessions.close_session(session_id=session_id, actor=actor)
        return ok(_session_payload(session, actor))

    @app.route(f"{API_PREFIX}/sessions/active", methods=["GET"], endpoint="active_sessions")
    def active_sessions():
        actor = require_role(current_actor(), Role.STUDENT)
        rows = sessions.list_active_sessions_for_student(actor.user_id)
        return ok([_session_payload(s, actor) for s in rows])

    @app.route(f"{API_PREFIX}/sessions/my-sessions", methods=["GET"], endpoint="my_sessions")
    def my_sessions():
        actor = require_role(current_actor(), Role.FACULTY, Role.ADMIN)
        return ok([_session_payload(s, actor) for s in sessions.list_sessions_created_by(actor)])

    @app.route(f"{API_PREFIX}/sessions/section/<int:section_id>", methods=["GET"], endpoint="section_sessions")
    def section_sessions(section_id: int):
        actor = current_actor()
        rows = sessions.list_section_sessions(actor=actor, section_id=section_id)
        return ok([_session_payload(s, actor) for s in rows])

    @app.route(f"{API_PREFIX}/sessions/by-code/<code>", methods=["GET"], endpoint="session_by_code")
    def session_by_code(code: str):
        actor = current_actor()
        return ok(_session_payload(sessions.resolve_backup_code(code), actor))

    @app.route(f"{API_PREFIX}/sessions/<int:session_id>/qr.png", methods=["GET"], endpoint="session_qr")
    def session_qr(session_id: int):
        actor = require_role(current_actor(), Role.FACULTY, Role.ADMIN)
        session = sessions.get_session(session_id)
        if not sessions.can_manage_session(actor, session):
            raise AuthorizationError("Only the session's creator or an admin can display its code")

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=2,
        )
        qr.add_data(session.backup_code)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        buf.seek(0)
        return send_file(buf, mimetype="image/png")
