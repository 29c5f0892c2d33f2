from __future__ import annotations

from datetime import date, datetime, time
from typing import Iterable, Optional, Protocol, Sequence

from ..common.geo import Coordinate
from ..core.enums import SessionStatus
from .model import AttendanceSession


class SessionRepository(Protocol):
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
        """Insert an active session; ``None`` when the backup code is already taken."""

        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_by_backup_code(self, backup_code: str) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def list_for_section(self, section_id: int) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def list_for_sections(
        self,
        section_ids: Iterable[int],
        *,
        status: Optional[SessionStatus] = None,
    ) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def list_created_by(self, user_id: int, *, limit: int = 200) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def close_if_active(self, *, session_id: int, closed_at: datetime, grace_minutes: int) -> bool:
        """Compare-and-set active -> closed.

        Returns False when the session is no longer active (closed by someone
        else, or past its end + grace at ``closed_at``).
        """

        raise NotImplementedError
