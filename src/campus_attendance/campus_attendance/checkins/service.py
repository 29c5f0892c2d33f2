from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from ..common.geo import distance_meters
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import CheckInOutcome, SessionStatus
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    SessionUnavailableError,
)
from ..sessions.service import SessionService
from ..users.model import Actor
from ..users.repository import DirectoryRepository
from .factory import GeofenceStrategyFactory
from .model import CheckIn, ReportedCoordinates
from .repository import CheckInRepository

logger = logging.getLogger(__name__)


class CheckInService:
    """Validates and records a student's attendance against an active session.

    Out-of-geofence submissions are stored as ``flagged`` rather than rejected
    so the evidence survives for review.
    """

    def __init__(
        self,
        checkins: CheckInRepository,
        sessions: SessionService,
        directory: DirectoryRepository,
        *,
        strategy_factory: GeofenceStrategyFactory | None = None,
    ):
        self._checkins = checkins
        self._sessions = sessions
        self._directory = directory
        self._strategy = (strategy_factory or GeofenceStrategyFactory()).create()

    def submit_check_in(
        self,
        *,
        session_id: int,
        student_id: int,
        reported: ReportedCoordinates,
        now: datetime | None = None,
    ) -> CheckIn:
        now = now or datetime.now()
        reported = reported.validated()

        session = self._sessions.get_session(int(session_id), now=now)
        if session.status != SessionStatus.ACTIVE:
            raise SessionUnavailableError(f"Session is {session.status.value}, check-in is closed")
        if now < session.starts_at:
            raise SessionUnavailableError("Session has not started yet")

        if not self._directory.is_enrolled(student_id=int(student_id), section_id=session.section_id):
            raise AuthorizationError("You are not enrolled in this section")

        existing = self._checkins.get_for_session_and_student(session_id=session.session_id, student_id=int(student_id))
        if existing:
            raise ConflictError("You have already checked in to this session")

        distance = distance_meters(session.anchor, reported.coordinate)
        decision = self._strategy.decide(
            distance_m=distance,
            radius_m=session.geofence_radius_m,
            accuracy_m=reported.accuracy_m,
        )

        checkin_id = self._checkins.create_checkin(
            session_id=session.session_id,
            student_id=int(student_id),
            submitted_at=now,
            reported=reported,
            distance_m=distance,
            outcome=decision.outcome,
            grace_minutes=self._sessions.policy.grace_minutes,
        )
        if checkin_id is None:
            # Lost a race: either a concurrent retry stored first or the session closed.
            if self._checkins.get_for_session_and_student(session_id=session.session_id, student_id=int(student_id)):
                raise ConflictError("You have already checked in to this session")
            raise SessionUnavailableError("Session closed before the check-in was recorded")

        checkin = self._checkins.get_by_id(checkin_id)
        if not checkin:
            raise NotFoundError("Check-in was not stored")

        if decision.outcome == CheckInOutcome.FLAGGED:
            logger.warning(
                "Check-in %s flagged: student %s, session %s (%s)",
                checkin.checkin_id,
                checkin.student_id,
                checkin.session_id,
                decision.note,
            )
        else:
            logger.info(
                "Check-in %s accepted: student %s, session %s, %.1fm",
                checkin.checkin_id,
                checkin.student_id,
                checkin.session_id,
                distance,
            )
        return checkin

    def list_session_check_ins(self, *, session_id: int, actor: Actor) -> Sequence[CheckIn]:
        session = self._sessions.get_session(int(session_id))
        if not (
            self._sessions.can_manage_session(actor, session)
            or self._sessions.can_manage_section(actor, session.section_id)
        ):
            raise AuthorizationError("You cannot view check-ins of this session")
        return self._checkins.list_for_session(session.session_id)

    def list_student_check_ins(self, student_id: int, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[CheckIn]:
        return self._checkins.list_for_student(int(student_id), limit=int(limit))

    def list_flagged_check_ins(self, *, section_id: int, actor: Actor) -> Sequence[CheckIn]:
        if not self._sessions.can_manage_section(actor, int(section_id)):
            raise AuthorizationError("You cannot review check-ins of this section")

        sessions = self._sessions.list_section_sessions(actor=actor, section_id=int(section_id))
        checkins = self._checkins.list_for_sessions([s.session_id for s in sessions])
        return [c for c in checkins if c.is_flagged]
