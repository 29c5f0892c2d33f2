from __future__ import annotations

import logging
import secrets
from datetime import date, datetime, time
from typing import Callable, Sequence

from ..common.geo import Coordinate
from ..common.validators import require_in_range, require_latitude, require_longitude, require_non_empty
from ..core.constants import (
    BACKUP_CODE_BYTES,
    DEFAULT_GEOFENCE_RADIUS_M,
    DEFAULT_LIST_LIMIT,
    MAX_GEOFENCE_RADIUS_M,
    MIN_GEOFENCE_RADIUS_M,
)
from ..core.enums import SessionStatus
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    SessionUnavailableError,
    ValidationError,
)
from ..users.model import Actor
from ..users.repository import DirectoryRepository
from .model import AttendanceSession
from .policy import SessionPolicy
from .repository import SessionRepository

logger = logging.getLogger(__name__)

_CODE_ATTEMPTS = 5


def generate_backup_code() -> str:
    return secrets.token_hex(BACKUP_CODE_BYTES).upper()


class SessionService:
    """Owns attendance sessions and their lifecycle (active -> closed/expired)."""

    def __init__(
        self,
        sessions: SessionRepository,
        directory: DirectoryRepository,
        *,
        policy: SessionPolicy | None = None,
        default_radius_m: float = DEFAULT_GEOFENCE_RADIUS_M,
        code_generator: Callable[[], str] = generate_backup_code,
    ):
        self._sessions = sessions
        self._directory = directory
        self._policy = policy or SessionPolicy()
        self._default_radius_m = float(default_radius_m)
        self._code_generator = code_generator

    @property
    def policy(self) -> SessionPolicy:
        return self._policy

    def can_manage_section(self, actor: Actor, section_id: int) -> bool:
        if actor.is_admin:
            return True
        return actor.is_faculty and self._directory.is_instructor(user_id=actor.user_id, section_id=section_id)

    def can_manage_session(self, actor: Actor, session: AttendanceSession) -> bool:
        return actor.is_admin or actor.user_id == session.created_by

    def open_session(
        self,
        *,
        actor: Actor,
        section_id: int,
        session_date: date,
        start_time: time,
        end_time: time,
        anchor: Coordinate,
        geofence_radius_m: float | None = None,
        now: datetime | None = None,
    ) -> AttendanceSession:
        now = now or datetime.now()

        if end_time <= start_time:
            raise ValidationError("End time must be after start time")

        radius = self._default_radius_m if geofence_radius_m is None else geofence_radius_m
        radius = require_in_range(radius, "geofenceRadius", MIN_GEOFENCE_RADIUS_M, MAX_GEOFENCE_RADIUS_M)
        anchor = Coordinate(latitude=require_latitude(anchor.latitude), longitude=require_longitude(anchor.longitude))

        if not self.can_manage_section(actor, int(section_id)):
            raise AuthorizationError("Only the section's instructor or an admin can start attendance")

        for _ in range(_CODE_ATTEMPTS):
            code = self._code_generator()
            session_id = self._sessions.create_session(
                section_id=int(section_id),
                session_date=session_date,
                start_time=start_time,
                end_time=end_time,
                geofence_radius_m=radius,
                anchor=anchor,
                backup_code=code,
                created_by=actor.user_id,
                created_at=now,
            )
            if session_id is not None:
                break
            logger.info("Backup code collision for section %s, regenerating", section_id)
        else:
            raise ConflictError("Could not allocate a unique backup code, try again")

        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError("Session was not stored")

        logger.info(
            "Session %s opened for section %s by user %s (%s %s-%s, radius=%.1fm)",
            session.session_id,
            session.section_id,
            actor.user_id,
            session.session_date,
            session.start_time,
            session.end_time,
            session.geofence_radius_m,
        )
        return self._policy.with_effective_status(session, now)

    def close_session(self, *, session_id: int, actor: Actor, now: datetime | None = None) -> AttendanceSession:
        now = now or datetime.now()

        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        if not self.can_manage_session(actor, session):
            raise AuthorizationError("Only the session's creator or an admin can close it")

        status = self._policy.effective_status(session, now)
        if status != SessionStatus.ACTIVE:
            raise ConflictError(f"Session is already {status.value}")

        closed = self._sessions.close_if_active(
            session_id=session.session_id,
            closed_at=now,
            grace_minutes=self._policy.grace_minutes,
        )
        if not closed:
            raise ConflictError("Session is no longer active")

        logger.info("Session %s closed by user %s", session.session_id, actor.user_id)
        return self.get_session(session.session_id, now=now)

    def get_session(self, session_id: int, *, now: datetime | None = None) -> AttendanceSession:
        now = now or datetime.now()
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        return self._policy.with_effective_status(session, now)

    def list_active_sessions_for_student(
        self,
        student_id: int,
        *,
        now: datetime | None = None,
    ) -> Sequence[AttendanceSession]:
        now = now or datetime.now()
        section_ids = self._directory.list_sections_for_student(int(student_id))
        if not section_ids:
            return []

        stored = self._sessions.list_for_sections(section_ids, status=SessionStatus.ACTIVE)
        return [s for s in stored if self._policy.is_open(s, now)]

    def list_section_sessions(
        self,
        *,
        actor: Actor,
        section_id: int,
        now: datetime | None = None,
    ) -> Sequence[AttendanceSession]:
        now = now or datetime.now()
        allowed = self.can_manage_section(actor, int(section_id)) or self._directory.is_enrolled(
            student_id=actor.user_id, section_id=int(section_id)
        )
        if not allowed:
            raise AuthorizationError("You are not a member of this section")

        return [self._policy.with_effective_status(s, now) for s in self._sessions.list_for_section(int(section_id))]

    def list_sessions_created_by(
        self,
        actor: Actor,
        *,
        limit: int = DEFAULT_LIST_LIMIT,
        now: datetime | None = None,
    ) -> Sequence[AttendanceSession]:
        now = now or datetime.now()
        return [
            self._policy.with_effective_status(s, now)
            for s in self._sessions.list_created_by(actor.user_id, limit=int(limit))
        ]

    def resolve_backup_code(self, code: str, *, now: datetime | None = None) -> AttendanceSession:
        """Locate an open session by its backup code.

        The code only identifies the session; presence is still decided by the
        geofence at check-in.
        """

        now = now or datetime.now()
        code = require_non_empty(code, "Backup code").upper()

        session = self._sessions.get_by_backup_code(code)
        if not session:
            raise NotFoundError("Unknown backup code")
        if not self._policy.accepts_backup_code(session, now):
            raise SessionUnavailableError("Backup code has expired")
        return self._policy.with_effective_status(session, now)

