from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, time, timedelta

import pytest

from campus_attendance.checkins.model import CheckIn
from campus_attendance.common.geo import Coordinate
from campus_attendance.container import EngineSettings, assemble
from campus_attendance.core.enums import ExcuseStatus, Role, SessionStatus
from campus_attendance.excuses.model import ExcuseRequest
from campus_attendance.sessions.model import AttendanceSession
from campus_attendance.users.model import Actor, Student

SECTION_ID = 100
OTHER_SECTION_ID = 200

ADMIN_ID = 1
INSTRUCTOR_ID = 2
OTHER_FACULTY_ID = 3
STUDENT_A = 10
STUDENT_B = 11
STUDENT_C = 12
OUTSIDER_ID = 13

CLASS_DAY = date(2026, 3, 2)
CLASS_START = time(9, 0)
CLASS_END = time(10, 0)
DURING_CLASS = datetime(2026, 3, 2, 9, 5)
AFTER_CLASS = datetime(2026, 3, 2, 10, 30)


class FakeDirectory:
    def __init__(self):
        self.students: dict[int, Student] = {}
        self.enrollments: set[tuple[int, int]] = set()
        self.instructors: dict[int, int] = {}

    def add_student(self, user_id: int, *, number: str | None = None, first="Student", last=None, sections=()):
        self.students[user_id] = Student(
            user_id=user_id,
            student_number=number,
            first_name=first,
            last_name=last or str(user_id),
            email=f"s{user_id}@campus.test",
        )
        for section_id in sections:
            self.enrollments.add((section_id, user_id))

    def is_enrolled(self, *, student_id, section_id):
        return (int(section_id), int(student_id)) in self.enrollments

    def is_instructor(self, *, user_id, section_id):
        return self.instructors.get(int(section_id)) == int(user_id)

    def list_enrolled_students(self, section_id):
        return [self.students[sid] for (sec, sid) in self.enrollments if sec == int(section_id)]

    def list_sections_for_student(self, student_id):
        return sorted(sec for (sec, sid) in self.enrollments if sid == int(student_id))

    def list_sections_for_instructor(self, user_id):
        return sorted(sec for sec, uid in self.instructors.items() if uid == int(user_id))


class FakeSessionsRepo:
    """In-memory stand-in with the same atomicity guarantees as the MySQL store."""

    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self.rows: dict[int, AttendanceSession] = {}

    def create_session(self, *, section_id, session_date, start_time, end_time, geofence_radius_m, anchor,
                       backup_code, created_by, created_at):
        with self._lock:
            if any(s.backup_code == backup_code for s in self.rows.values()):
                return None
            sid = self._next_id
            self._next_id += 1
            self.rows[sid] = AttendanceSession(
                session_id=sid,
                section_id=int(section_id),
                session_date=session_date,
                start_time=start_time,
                end_time=end_time,
                status=SessionStatus.ACTIVE,
                geofence_radius_m=float(geofence_radius_m),
                anchor=anchor,
                backup_code=backup_code,
                created_by=int(created_by),
                created_at=created_at,
            )
            return sid

    def get_by_id(self, session_id):
        return self.rows.get(int(session_id))

    def get_by_backup_code(self, backup_code):
        return next((s for s in self.rows.values() if s.backup_code == backup_code), None)

    def list_for_section(self, section_id):
        return [s for s in self.rows.values() if s.section_id == int(section_id)]

    def list_for_sections(self, section_ids, *, status=None):
        ids = {int(x) for x in section_ids}
        return [s for s in self.rows.values() if s.section_id in ids and (status is None or s.status == status)]

    def list_created_by(self, user_id, *, limit=200):
        return [s for s in self.rows.values() if s.created_by == int(user_id)][:limit]

    def close_if_active(self, *, session_id, closed_at, grace_minutes):
        with self._lock:
            s = self.rows.get(int(session_id))
            if not s or s.status != SessionStatus.ACTIVE:
                return False
            if s.ends_at + timedelta(minutes=grace_minutes) < closed_at:
                return False
            self.rows[s.session_id] = replace(s, status=SessionStatus.CLOSED, closed_at=closed_at)
            return True

    def is_open_at(self, session_id, at, grace_minutes) -> bool:
        s = self.rows.get(int(session_id))
        return (
            bool(s)
            and s.status == SessionStatus.ACTIVE
            and s.starts_at <= at <= s.ends_at + timedelta(minutes=grace_minutes)
        )


class FakeCheckInsRepo:
    def __init__(self, sessions: FakeSessionsRepo):
        self._sessions = sessions
        self._lock = threading.Lock()
        self._next_id = 1
        self.rows: dict[int, CheckIn] = {}

    def create_checkin(self, *, session_id, student_id, submitted_at, reported, distance_m, outcome, grace_minutes):
        with self._lock:
            if not self._sessions.is_open_at(session_id, submitted_at, grace_minutes):
                return None
            if self.get_for_session_and_student(session_id=session_id, student_id=student_id):
                return None
            cid = self._next_id
            self._next_id += 1
            self.rows[cid] = CheckIn(
                checkin_id=cid,
                session_id=int(session_id),
                student_id=int(student_id),
                submitted_at=submitted_at,
                reported=reported,
                distance_m=distance_m,
                outcome=outcome,
            )
            return cid

    def get_by_id(self, checkin_id):
        return self.rows.get(int(checkin_id))

    def get_for_session_and_student(self, *, session_id, student_id):
        return next(
            (c for c in self.rows.values() if c.session_id == int(session_id) and c.student_id == int(student_id)),
            None,
        )

    def list_for_session(self, session_id):
        return [c for c in self.rows.values() if c.session_id == int(session_id)]

    def list_for_sessions(self, session_ids):
        ids = {int(x) for x in session_ids}
        return [c for c in self.rows.values() if c.session_id in ids]

    def list_for_student(self, student_id, *, limit=200):
        return [c for c in self.rows.values() if c.student_id == int(student_id)][:limit]


class FakeExcusesRepo:
    def __init__(self, sessions: FakeSessionsRepo):
        self._sessions = sessions
        self._lock = threading.Lock()
        self._next_id = 1
        self.rows: dict[int, ExcuseRequest] = {}

    def create_request(self, *, student_id, session_id, reason, document_ref, created_at):
        with self._lock:
            if self.find_open(student_id=student_id, session_id=session_id):
                return None
            rid = self._next_id
            self._next_id += 1
            self.rows[rid] = ExcuseRequest(
                request_id=rid,
                student_id=int(student_id),
                session_id=int(session_id),
                reason=reason,
                status=ExcuseStatus.PENDING,
                created_at=created_at,
                document_ref=document_ref,
            )
            return rid

    def get_by_id(self, request_id):
        return self.rows.get(int(request_id))

    def find_open(self, *, student_id, session_id):
        return next(
            (
                r
                for r in self.rows.values()
                if r.student_id == int(student_id)
                and r.session_id == int(session_id)
                and r.status in {ExcuseStatus.PENDING, ExcuseStatus.APPROVED}
            ),
            None,
        )

    def list_for_sessions(self, session_ids, *, status=None):
        ids = {int(x) for x in session_ids}
        return [r for r in self.rows.values() if r.session_id in ids and (status is None or r.status == status)]

    def list_requests(self, *, status=None, student_id=None, section_ids=None, limit=200):
        rows = list(self.rows.values())
        if status is not None:
            rows = [r for r in rows if r.status == status]
        if student_id is not None:
            rows = [r for r in rows if r.student_id == int(student_id)]
        if section_ids is not None:
            allowed = {int(x) for x in section_ids}
            rows = [r for r in rows if self._sessions.get_by_id(r.session_id).section_id in allowed]
        return sorted(rows, key=lambda r: r.request_id, reverse=True)[:limit]

    def decide(self, *, request_id, status, reviewed_by, reviewed_at, review_notes=None):
        with self._lock:
            r = self.rows.get(int(request_id))
            if not r or r.status != ExcuseStatus.PENDING:
                return False
            self.rows[r.request_id] = replace(
                r,
                status=status,
                reviewed_by=reviewed_by,
                reviewed_at=reviewed_at,
                review_notes=review_notes,
            )
            return True


@pytest.fixture
def directory():
    d = FakeDirectory()
    d.instructors[SECTION_ID] = INSTRUCTOR_ID
    d.instructors[OTHER_SECTION_ID] = OTHER_FACULTY_ID
    d.add_student(STUDENT_A, number="20210010", first="Ali", last="Demir", sections=(SECTION_ID,))
    d.add_student(STUDENT_B, number="20210011", first="Berk", last="Yilmaz", sections=(SECTION_ID,))
    d.add_student(STUDENT_C, number=None, first="Cem", last="Aydin", sections=(SECTION_ID,))
    d.add_student(OUTSIDER_ID, number="20210013", first="Deniz", last="Kara", sections=(OTHER_SECTION_ID,))
    return d


@pytest.fixture
def sessions_repo():
    return FakeSessionsRepo()


@pytest.fixture
def checkins_repo(sessions_repo):
    return FakeCheckInsRepo(sessions_repo)


@pytest.fixture
def excuses_repo(sessions_repo):
    return FakeExcusesRepo(sessions_repo)


@pytest.fixture
def engine_settings():
    return EngineSettings()


@pytest.fixture
def container(directory, sessions_repo, checkins_repo, excuses_repo, engine_settings):
    return assemble(
        directory_repo=directory,
        sessions_repo=sessions_repo,
        checkins_repo=checkins_repo,
        excuses_repo=excuses_repo,
        settings=engine_settings,
    )


@pytest.fixture
def admin():
    return Actor(user_id=ADMIN_ID, role=Role.ADMIN)


@pytest.fixture
def instructor():
    return Actor(user_id=INSTRUCTOR_ID, role=Role.FACULTY)


@pytest.fixture
def other_faculty():
    return Actor(user_id=OTHER_FACULTY_ID, role=Role.FACULTY)


ANCHOR = Coordinate(latitude=39.0, longitude=35.0)


@pytest.fixture
def open_session(container, instructor):
    """Open a session for SECTION_ID (09:00-10:00, radius 15 m) unless overridden."""

    def _open(**overrides):
        kwargs = dict(
            actor=instructor,
            section_id=SECTION_ID,
            session_date=CLASS_DAY,
            start_time=CLASS_START,
            end_time=CLASS_END,
            anchor=ANCHOR,
            geofence_radius_m=15,
            now=datetime(2026, 3, 2, 8, 55),
        )
        kwargs.update(overrides)
        return container.session_service.open_session(**kwargs)

    return _open


def student(user_id: int) -> Actor:
    return Actor(user_id=user_id, role=Role.STUDENT)
