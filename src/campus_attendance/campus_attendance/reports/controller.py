from __future__ import annotations

from datetime import datetime

from flask import Flask

from ..common.web import current_actor, ok, require_role
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError

API_PREFIX = "/api/v1/attendance"


def register(app: Flask, container: Container) -> None:
    aggregator = container.aggregator
    sessions = container.session_service

    def _require_section_manager(section_id: int):
        actor = require_role(current_actor(), Role.FACULTY, Role.ADMIN)
        if not sessions.can_manage_section(actor, section_id):
            raise AuthorizationError("You cannot view the report of this section")
        return actor

    @app.route(f"{API_PREFIX}/report/<int:section_id>", methods=["GET"], endpoint="section_report")
    def section_report(section_id: int):
        _require_section_manager(section_id)
        rows = aggregator.compute_section_report(section_id)
        return ok({"sectionId": section_id, "report": [r.to_dict() for r in rows]})

    @app.route(f"{API_PREFIX}/report/<int:section_id>/csv", methods=["GET"], endpoint="section_report_csv")
    def section_report_csv(section_id: int):
        _require_section_manager(section_id)
        rows = aggregator.compute_section_report(section_id)

        csv_bytes = container.exporter.export_csv(rows).encode("utf-8-sig")
        filename = f"attendance-report-{section_id}-{datetime.now().strftime('%Y%m%d%H%M')}.csv"
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route(f"{API_PREFIX}/my-attendance", methods=["GET"], endpoint="my_attendance")
    def my_attendance():
        actor = require_role(current_actor(), Role.STUDENT)
        return ok([s.to_dict() for s in aggregator.compute_student_overview(actor.user_id)])

    @app.route(
        f"{API_PREFIX}/summary/<int:section_id>/<int:student_id>",
        methods=["GET"],
        endpoint="student_summary",
    )
    def student_summary(section_id: int, student_id: int):
        actor = current_actor()
        is_self = actor.role == Role.STUDENT and actor.user_id == student_id
        if not is_self and not sessions.can_manage_section(actor, section_id):
            raise AuthorizationError("You cannot view this summary")
        return ok(aggregator.compute_summary(section_id, student_id).to_dict())
