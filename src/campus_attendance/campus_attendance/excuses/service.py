from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..checkins.repository import CheckInRepository
from ..common.validators import require_min_length
from ..core.constants import DEFAULT_LIST_LIMIT, MIN_EXCUSE_REASON_LENGTH
from ..core.enums import CheckInOutcome, ExcuseStatus, ReviewDecision
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..sessions.service import SessionService
from ..users.model import Actor
from ..users.repository import DirectoryRepository
from .model import ExcuseRequest
from .repository import ExcuseRepository

logger = logging.getLogger(__name__)

_DECISION_TO_STATUS = {
    ReviewDecision.APPROVE: ExcuseStatus.APPROVED,
    ReviewDecision.REJECT: ExcuseStatus.REJECTED,
}


class ExcuseService:
    """Excuse request workflow: pending -> approved | rejected.

    Approval never touches check-in records; summaries read approved requests
    at computation time.
    """

    def __init__(
        self,
        excuses: ExcuseRepository,
        checkins: CheckInRepository,
        sessions: SessionService,
        directory: DirectoryRepository,
    ):
        self._excuses = excuses
        self._checkins = checkins
        self._sessions = sessions
        self._directory = directory

    def create_request(
        self,
        *,
        student_id: int,
        session_id: int,
        reason: str,
        document_ref: Optional[str] = None,
        now: datetime | None = None,
    ) -> ExcuseRequest:
        now = now or datetime.now()
        reason = require_min_length((reason or "").strip(), "Reason", MIN_EXCUSE_REASON_LENGTH)

        session = self._sessions.get_session(int(session_id), now=now)
        if not self._directory.is_enrolled(student_id=int(student_id), section_id=session.section_id):
            raise AuthorizationError("You are not enrolled in this section")

        self._ensure_no_open_request(student_id=int(student_id), session_id=session.session_id)

        checkin = self._checkins.get_for_session_and_student(session_id=session.session_id, student_id=int(student_id))
        if checkin and checkin.outcome == CheckInOutcome.ACCEPTED:
            raise ConflictError("Your attendance for this session is already counted")

        request_id = self._excuses.create_request(
            student_id=int(student_id),
            session_id=session.session_id,
            reason=reason,
            document_ref=(document_ref or "").strip() or None,
            created_at=now,
        )
        if request_id is None:
            self._ensure_no_open_request(student_id=int(student_id), session_id=session.session_id)
            raise ConflictError("An excuse request for this session already exists")

        created = self._excuses.get_by_id(request_id)
        if not created:
            raise NotFoundError("Excuse request was not stored")

        logger.info(
            "Excuse request %s filed by student %s for session %s",
            created.request_id,
            created.student_id,
            created.session_id,
        )
        return created

    def _ensure_no_open_request(self, *, student_id: int, session_id: int) -> None:
        existing = self._excuses.find_open(student_id=student_id, session_id=session_id)
        if not existing:
            return
        if existing.status == ExcuseStatus.APPROVED:
            raise ConflictError("This absence is already excused")
        raise ConflictError("An excuse request for this session is already pending")

    def review(
        self,
        *,
        request_id: int,
        actor: Actor,
        decision: ReviewDecision | str,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> ExcuseRequest:
        now = now or datetime.now()
        try:
            decision = ReviewDecision(decision)
        except ValueError:
            raise ValidationError("Decision must be 'approve' or 'reject'")

        req = self._excuses.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("Excuse request not found")

        session = self._sessions.get_session(req.session_id, now=now)
        if not (
            self._sessions.can_manage_section(actor, session.section_id)
            or (actor.is_faculty and self._sessions.can_manage_session(actor, session))
        ):
            raise AuthorizationError("Only the section's instructor or an admin can review excuses")

        if not req.is_pending:
            raise ConflictError(f"Request is already {req.status.value}")

        decided = self._excuses.decide(
            request_id=req.request_id,
            status=_DECISION_TO_STATUS[decision],
            reviewed_by=actor.user_id,
            reviewed_at=now,
            review_notes=(notes or "").strip() or None,
        )
        if not decided:
            raise ConflictError("Request was reviewed by someone else")

        logger.info("Excuse request %s %s by user %s", req.request_id, _DECISION_TO_STATUS[decision].value, actor.user_id)
        reviewed = self._excuses.get_by_id(req.request_id)
        if not reviewed:
            raise NotFoundError("Excuse request not found")
        return reviewed

    def approve(self, *, request_id: int, actor: Actor, notes: Optional[str] = None, now: datetime | None = None):
        return self.review(request_id=request_id, actor=actor, decision=ReviewDecision.APPROVE, notes=notes, now=now)

    def reject(self, *, request_id: int, actor: Actor, notes: Optional[str] = None, now: datetime | None = None):
        return self.review(request_id=request_id, actor=actor, decision=ReviewDecision.REJECT, notes=notes, now=now)

    def list_my_requests(self, *, student_id: int, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[ExcuseRequest]:
        return self._excuses.list_requests(student_id=int(student_id), limit=int(limit))

    def list_requests_for_reviewer(
        self,
        *,
        actor: Actor,
        status: Optional[ExcuseStatus] = None,
        limit: int = 500,
    ) -> Sequence[ExcuseRequest]:
        if actor.is_admin:
            return self._excuses.list_requests(status=status, limit=int(limit))
        if actor.is_faculty:
            section_ids = self._directory.list_sections_for_instructor(actor.user_id)
            return self._excuses.list_requests(status=status, section_ids=section_ids, limit=int(limit))
        raise AuthorizationError("Only faculty or admins can review excuse requests")
