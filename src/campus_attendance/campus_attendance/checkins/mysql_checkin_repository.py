from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import CheckInOutcome, CheckInStatus, SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from .model import CheckIn, ReportedCoordinates
from .repository import CheckInRepository

_COLUMNS = """
    checkin_id, session_id, student_id, submitted_at, latitude, longitude,
    accuracy_m, distance_m, outcome, status
"""


def _row_to_checkin(r: dict) -> CheckIn:
    accuracy = r.get("accuracy_m")
    return CheckIn(
        checkin_id=int(r["checkin_id"]),
        session_id=int(r["session_id"]),
        student_id=int(r["student_id"]),
        submitted_at=r["submitted_at"],
        reported=ReportedCoordinates(
            latitude=float(r["latitude"]),
            longitude=float(r["longitude"]),
            accuracy_m=float(accuracy) if accuracy is not None else None,
        ),
        distance_m=float(r["distance_m"]),
        outcome=CheckInOutcome(r["outcome"]),
        status=CheckInStatus(r.get("status") or CheckInStatus.PRESENT.value),
    )


class MySQLCheckInRepository(CheckInRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_checkin(
        self,
        *,
        session_id: int,
        student_id: int,
        submitted_at: datetime,
        reported: ReportedCoordinates,
        distance_m: float,
        outcome: CheckInOutcome,
        grace_minutes: int,
    ) -> Optional[int]:
        # INSERT ... SELECT reads the session row under a shared lock, so a
        # concurrent close either commits first (0 rows) or waits for us.
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_checkins(
                        session_id, student_id, submitted_at, latitude, longitude,
                        accuracy_m, distance_m, outcome, status
                    )
                    SELECT s.session_id, %s, %s, %s, %s, %s, %s, %s, %s
                    FROM attendance_sessions s
                    WHERE s.session_id=%s
                      AND s.status=%s
                      AND TIMESTAMP(s.session_date, s.start_time) <= %s
                      AND TIMESTAMP(s.session_date, s.end_time) + INTERVAL %s MINUTE >= %s
                    """,
                    (
                        int(student_id),
                        submitted_at,
                        reported.latitude,
                        reported.longitude,
                        reported.accuracy_m,
                        float(distance_m),
                        outcome.value,
                        CheckInStatus.PRESENT.value,
                        int(session_id),
                        SessionStatus.ACTIVE.value,
                        submitted_at,
                        int(grace_minutes),
                        submitted_at,
                    ),
                )
                if cur.rowcount != 1:
                    return None
                return int(cur.lastrowid)
        except Exception as exc:
            if is_duplicate_key(exc):
                return None
            raise

    def get_by_id(self, checkin_id: int) -> Optional[CheckIn]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_checkins WHERE checkin_id=%s", (int(checkin_id),))
            r = fetchone(cur)
            return _row_to_checkin(r) if r else None

    def get_for_session_and_student(self, *, session_id: int, student_id: int) -> Optional[CheckIn]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_checkins WHERE session_id=%s AND student_id=%s",
                (int(session_id), int(student_id)),
            )
            r = fetchone(cur)
            return _row_to_checkin(r) if r else None

    def list_for_session(self, session_id: int) -> Sequence[CheckIn]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_checkins
                WHERE session_id=%s
                ORDER BY submitted_at, checkin_id
                """,
                (int(session_id),),
            )
            return [_row_to_checkin(r) for r in fetchall(cur)]

    def list_for_sessions(self, session_ids: Iterable[int]) -> Sequence[CheckIn]:
        placeholders, params = in_clause(session_ids)
        if not params:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_checkins
                WHERE session_id IN ({placeholders})
                ORDER BY session_id, student_id
                """,
                params,
            )
            return [_row_to_checkin(r) for r in fetchall(cur)]

    def list_for_student(self, student_id: int, *, limit: int = 200) -> Sequence[CheckIn]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_checkins
                WHERE student_id=%s
                ORDER BY submitted_at DESC
                LIMIT %s
                """,
                (int(student_id), int(limit)),
            )
            return [_row_to_checkin(r) for r in fetchall(cur)]
