from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import ExcuseStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from .model import ExcuseRequest
from .repository import ExcuseRepository

_COLUMNS = """
    r.request_id, r.student_id, r.session_id, r.reason, r.document_ref, r.status,
    r.created_at, r.reviewed_by, r.reviewed_at, r.review_notes
"""


def _row_to_request(r: dict) -> ExcuseRequest:
    return ExcuseRequest(
        request_id=int(r["request_id"]),
        student_id=int(r["student_id"]),
        session_id=int(r["session_id"]),
        reason=r["reason"],
        document_ref=r.get("document_ref"),
        status=ExcuseStatus(r["status"]),
        created_at=r["created_at"],
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        review_notes=r.get("review_notes"),
    )


class MySQLExcuseRepository(ExcuseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_request(
        self,
        *,
        student_id: int,
        session_id: int,
        reason: str,
        document_ref: Optional[str],
        created_at: datetime,
    ) -> Optional[int]:
        # uq_excuse_open covers (student, session, open_guard); open_guard is
        # NULL for rejected rows so they never block a resubmission.
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO excuse_requests(student_id, session_id, reason, document_ref, status, created_at)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(student_id),
                        int(session_id),
                        reason,
                        document_ref,
                        ExcuseStatus.PENDING.value,
                        created_at,
                    ),
                )
                return int(cur.lastrowid)
        except Exception as exc:
            if is_duplicate_key(exc):
                return None
            raise

    def get_by_id(self, request_id: int) -> Optional[ExcuseRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM excuse_requests r WHERE r.request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def find_open(self, *, student_id: int, session_id: int) -> Optional[ExcuseRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM excuse_requests r
                WHERE r.student_id=%s AND r.session_id=%s AND r.status IN (%s, %s)
                ORDER BY r.request_id DESC
                LIMIT 1
                """,
                (int(student_id), int(session_id), ExcuseStatus.PENDING.value, ExcuseStatus.APPROVED.value),
            )
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def list_for_sessions(
        self,
        session_ids: Iterable[int],
        *,
        status: Optional[ExcuseStatus] = None,
    ) -> Sequence[ExcuseRequest]:
        placeholders, params = in_clause(session_ids)
        if not params:
            return []

        sql = f"SELECT {_COLUMNS} FROM excuse_requests r WHERE r.session_id IN ({placeholders})"
        args: list = list(params)
        if status is not None:
            sql += " AND r.status=%s"
            args.append(status.value)
        sql += " ORDER BY r.session_id, r.student_id, r.request_id"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(args))
            return [_row_to_request(r) for r in fetchall(cur)]

    def list_requests(
        self,
        *,
        status: Optional[ExcuseStatus] = None,
        student_id: Optional[int] = None,
        section_ids: Optional[Iterable[int]] = None,
        limit: int = 200,
    ) -> Sequence[ExcuseRequest]:
        where: list[str] = []
        args: list = []

        if status is not None:
            where.append("r.status=%s")
            args.append(status.value)
        if student_id is not None:
            where.append("r.student_id=%s")
            args.append(int(student_id))
        if section_ids is not None:
            placeholders, params = in_clause(section_ids)
            if not params:
                return []
            where.append(f"s.section_id IN ({placeholders})")
            args.extend(params)

        where_sql = ("WHERE " + " AND ".join(where)) if where else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM excuse_requests r
                JOIN attendance_sessions s ON s.session_id = r.session_id
                {where_sql}
                ORDER BY r.created_at DESC, r.request_id DESC
                LIMIT %s
                """,
                tuple(args + [int(limit)]),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        request_id: int,
        status: ExcuseStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        review_notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE excuse_requests
                SET status=%s, reviewed_by=%s, reviewed_at=%s, review_notes=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    reviewed_at,
                    review_notes,
                    int(request_id),
                    ExcuseStatus.PENDING.value,
                ),
            )
            return cur.rowcount == 1
