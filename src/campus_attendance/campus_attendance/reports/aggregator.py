from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..checkins.model import CheckIn
from ..checkins.repository import CheckInRepository
from ..core.enums import CheckInOutcome, ExcuseStatus
from ..excuses.repository import ExcuseRepository
from ..sessions.model import AttendanceSession
from ..sessions.policy import SessionPolicy
from ..sessions.repository import SessionRepository
from ..users.repository import DirectoryRepository
from .model import AttendanceSummary, SectionReportRow
from .thresholds import StatusThresholds


class AttendanceAggregator:
    """Folds sessions, check-ins and approved excuses into attendance summaries.

    Nothing is cached: every call reads the raw facts again, so an excuse
    approved a moment ago shows up in the next summary. Any storage failure
    propagates; a partial summary is never returned.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        checkins: CheckInRepository,
        excuses: ExcuseRepository,
        directory: DirectoryRepository,
        *,
        policy: Optional[SessionPolicy] = None,
        thresholds: Optional[StatusThresholds] = None,
    ):
        self._sessions = sessions
        self._checkins = checkins
        self._excuses = excuses
        self._directory = directory
        self._policy = policy or SessionPolicy()
        self._thresholds = thresholds or StatusThresholds()

    def _settled_sessions(self, section_id: int, now: datetime) -> list[AttendanceSession]:
        # Sessions still active are excluded: attendance cannot be judged yet.
        return [s for s in self._sessions.list_for_section(int(section_id)) if self._policy.is_settled(s, now)]

    def _load_facts(self, session_ids: list[int]):
        checkins = self._checkins.list_for_sessions(session_ids) if session_ids else []
        approved = self._excuses.list_for_sessions(session_ids, status=ExcuseStatus.APPROVED) if session_ids else []
        return checkins, approved

    def compute_summary(self, section_id: int, student_id: int, *, now: datetime | None = None) -> AttendanceSummary:
        now = now or datetime.now()
        sessions = self._settled_sessions(section_id, now)
        session_ids = [s.session_id for s in sessions]
        checkins, approved = self._load_facts(session_ids)

        return self._summarize(
            section_id=int(section_id),
            student_id=int(student_id),
            session_ids=session_ids,
            checkins=[c for c in checkins if c.student_id == int(student_id)],
            excused_session_ids={e.session_id for e in approved if e.student_id == int(student_id)},
        )

    def compute_section_report(self, section_id: int, *, now: datetime | None = None) -> Sequence[SectionReportRow]:
        now = now or datetime.now()
        sessions = self._settled_sessions(section_id, now)
        session_ids = [s.session_id for s in sessions]
        checkins, approved = self._load_facts(session_ids)

        checkins_by_student: dict[int, list[CheckIn]] = {}
        for c in checkins:
            checkins_by_student.setdefault(c.student_id, []).append(c)

        excused_by_student: dict[int, set[int]] = {}
        for e in approved:
            excused_by_student.setdefault(e.student_id, set()).add(e.session_id)

        students = sorted(self._directory.list_enrolled_students(int(section_id)), key=lambda s: s.user_id)
        return [
            SectionReportRow(
                student=student,
                summary=self._summarize(
                    section_id=int(section_id),
                    student_id=student.user_id,
                    session_ids=session_ids,
                    checkins=checkins_by_student.get(student.user_id, []),
                    excused_session_ids=excused_by_student.get(student.user_id, set()),
                ),
            )
            for student in students
        ]

    def compute_student_overview(self, student_id: int, *, now: datetime | None = None) -> Sequence[AttendanceSummary]:
        now = now or datetime.now()
        return [
            self.compute_summary(section_id, int(student_id), now=now)
            for section_id in self._directory.list_sections_for_student(int(student_id))
        ]

    def _summarize(
        self,
        *,
        section_id: int,
        student_id: int,
        session_ids: Iterable[int],
        checkins: Iterable[CheckIn],
        excused_session_ids: set[int],
    ) -> AttendanceSummary:
        by_session = {c.session_id: c for c in checkins}

        total = attended = excused = absent = flagged = 0
        for session_id in session_ids:
            total += 1
            checkin = by_session.get(session_id)
            has_excuse = session_id in excused_session_ids

            if checkin and checkin.outcome == CheckInOutcome.ACCEPTED:
                attended += 1
            elif has_excuse:
                attended += 1
                excused += 1
            else:
                absent += 1

            if checkin and checkin.outcome == CheckInOutcome.FLAGGED and not has_excuse:
                flagged += 1

        percentage = (attended * 100.0 / total) if total else 0.0
        return AttendanceSummary(
            section_id=section_id,
            student_id=student_id,
            total_sessions=total,
            attended_sessions=attended,
            excused_sessions=excused,
            absent_sessions=absent,
            attendance_percentage=percentage,
            status=self._thresholds.classify(percentage),
            flagged_count=flagged,
        )
