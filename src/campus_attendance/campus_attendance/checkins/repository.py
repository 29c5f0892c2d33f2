from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import CheckInOutcome
from .model import CheckIn, ReportedCoordinates


class CheckInRepository(Protocol):
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
        """Atomically insert a check-in.

        The insert only happens while the session is open at
        ``submitted_at`` (started, still active) and no check-in exists for (session, student);
        otherwise ``None`` is returned and nothing is written.
        """

        raise NotImplementedError

    def get_by_id(self, checkin_id: int) -> Optional[CheckIn]:
        raise NotImplementedError

    def get_for_session_and_student(self, *, session_id: int, student_id: int) -> Optional[CheckIn]:
        raise NotImplementedError

    def list_for_session(self, session_id: int) -> Sequence[CheckIn]:
        raise NotImplementedError

    def list_for_sessions(self, session_ids: Iterable[int]) -> Sequence[CheckIn]:
        raise NotImplementedError

    def list_for_student(self, student_id: int, *, limit: int = 200) -> Sequence[CheckIn]:
        raise NotImplementedError
