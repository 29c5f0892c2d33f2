from __future__ import annotations

from datetime import date, datetime, time
from typing import Iterable, Optional, Sequence

from ..common.geo import Coordinate
from ..core.enums import SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key, normalize_mysql_time
from .model import AttendanceSession
from .repository import SessionRepository

_COLUMNS = """
    session_id, section_id, session_date, start_time, end_time, status,
    geofence_radius_m, latitude, longitude, backup_code, created_by,
    created_at, closed_at
"""


def _row_to_session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["session_id"]),
        section_id=int(r["section_id"]),
        session_date=r["session_date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        status=SessionStatus(r["status"]),
        geofence_radius_m=float(r["geofence_radius_m"]),
        anchor=Coordinate(latitude=float(r["latitude"]), longitude=float(r["longitude"])),
        backup_code=r["backup_code"],
        created_by=int(r["created_by"]),
        created_at=r["created_at"],
        closed_at=r.get("closed_at"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_session(
        self,
        *,
        section_id: int,
        session_date: date,
        start_time: time,
        end_time: time,
        geofence_radius_m: float,
        anchor: Coordinate,
        backup_code: str,
        created_by: int,
        created_at: datetime,
    ) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_sessions(
                        section_id, session_date, start_time, end_time, status,
                        geofence_radius_m, latitude, longitude, backup_code, created_by, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(section_id),
                        session_date,
                        start_time,
                        end_time,
                        SessionStatus.ACTIVE.value,
                        float(geofence_radius_m),
                        anchor.latitude,
                        anchor.longitude,
                        backup_code,
                        int(created_by),
                        created_at,
                    ),
                )
                return int(cur.lastrowid)
        except Exception as exc:
            if is_duplicate_key(exc):
                return None
            raise

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def get_by_backup_code(self, backup_code: str) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_sessions WHERE backup_code=%s", (backup_code,))
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def list_for_section(self, section_id: int) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE section_id=%s
                ORDER BY session_date, start_time, session_id
                """,
                (int(section_id),),
            )
            return [_row_to_session(r) for r in fetchall(cur)]

    def list_for_sections(
        self,
        section_ids: Iterable[int],
        *,
        status: Optional[SessionStatus] = None,
    ) -> Sequence[AttendanceSession]:
        placeholders, params = in_clause(section_ids)
        if not params:
            return []

        where = [f"section_id IN ({placeholders})"]
        args: list = list(params)
        if status is not None:
            where.append("status=%s")
            args.append(status.value)

        where_sql = " AND ".join(where)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE {where_sql}
                ORDER BY session_date, start_time, session_id
                """,
                tuple(args),
            )
            return [_row_to_session(r) for r in fetchall(cur)]

    def list_created_by(self, user_id: int, *, limit: int = 200) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE created_by=%s
                ORDER BY session_date DESC, start_time DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [_row_to_session(r) for r in fetchall(cur)]

    def close_if_active(self, *, session_id: int, closed_at: datetime, grace_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET status=%s, closed_at=%s
                WHERE session_id=%s
                  AND status=%s
                  AND TIMESTAMP(session_date, end_time) + INTERVAL %s MINUTE >= %s
                """,
                (
                    SessionStatus.CLOSED.value,
                    closed_at,
                    int(session_id),
                    SessionStatus.ACTIVE.value,
                    int(grace_minutes),
                    closed_at,
                ),
            )
            return cur.rowcount == 1
