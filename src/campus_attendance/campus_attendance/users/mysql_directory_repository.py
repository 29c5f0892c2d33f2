from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student
from .repository import DirectoryRepository


def _row_to_student(row: dict) -> Student:
    return Student(
        user_id=int(row["user_id"]),
        student_number=row.get("student_number"),
        first_name=row.get("first_name") or "",
        last_name=row.get("last_name") or "",
        email=row.get("email") or "",
    )


class MySQLDirectoryRepository(DirectoryRepository):
    """Read-only view over the campus directory tables.

    users/sections/section_enrollments are owned by the course management
    system; this repository never writes to them.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def is_enrolled(self, *, student_id: int, section_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS ok
                FROM section_enrollments
                WHERE student_id=%s AND section_id=%s AND status='active'
                """,
                (int(student_id), int(section_id)),
            )
            return fetchone(cur) is not None

    def is_instructor(self, *, user_id: int, section_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM sections WHERE section_id=%s AND instructor_id=%s",
                (int(section_id), int(user_id)),
            )
            return fetchone(cur) is not None

    def list_enrolled_students(self, section_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.student_number, u.first_name, u.last_name, u.email
                FROM section_enrollments e
                JOIN users u ON u.user_id = e.student_id
                WHERE e.section_id=%s AND e.status='active'
                ORDER BY u.user_id
                """,
                (int(section_id),),
            )
            return [_row_to_student(r) for r in fetchall(cur)]

    def list_sections_for_student(self, student_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT section_id
                FROM section_enrollments
                WHERE student_id=%s AND status='active'
                ORDER BY section_id
                """,
                (int(student_id),),
            )
            return [int(r["section_id"]) for r in fetchall(cur)]

    def list_sections_for_instructor(self, user_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT section_id FROM sections WHERE instructor_id=%s ORDER BY section_id",
                (int(user_id),),
            )
            return [int(r["section_id"]) for r in fetchall(cur)]
