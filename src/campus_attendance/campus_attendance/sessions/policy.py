from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from ..core.constants import DEFAULT_BACKUP_CODE_TTL_MINUTES, DEFAULT_SESSION_GRACE_MINUTES
from ..core.enums import SessionStatus
from .model import AttendanceSession


@dataclass(frozen=True)
class SessionPolicy:
    """Time rules for sessions.

    Expiry is a pure function of the clock: a stored ``active`` session whose
    end (+ grace) has passed reads as ``expired`` without any write.
    """

    grace_minutes: int = DEFAULT_SESSION_GRACE_MINUTES
    backup_code_ttl_minutes: int = DEFAULT_BACKUP_CODE_TTL_MINUTES

    def expires_at(self, session: AttendanceSession) -> datetime:
        return session.ends_at + timedelta(minutes=self.grace_minutes)

    def effective_status(self, session: AttendanceSession, now: datetime) -> SessionStatus:
        if session.status == SessionStatus.ACTIVE and now > self.expires_at(session):
            return SessionStatus.EXPIRED
        return session.status

    def with_effective_status(self, session: AttendanceSession, now: datetime) -> AttendanceSession:
        status = self.effective_status(session, now)
        if status == session.status:
            return session
        return replace(session, status=status)

    def is_open(self, session: AttendanceSession, now: datetime) -> bool:
        return self.effective_status(session, now) == SessionStatus.ACTIVE

    def is_settled(self, session: AttendanceSession, now: datetime) -> bool:
        """Closed or expired: attendance for the session can be judged."""
        return self.effective_status(session, now) in {SessionStatus.CLOSED, SessionStatus.EXPIRED}

    def backup_code_valid_until(self, session: AttendanceSession) -> datetime:
        return min(
            session.starts_at + timedelta(minutes=self.backup_code_ttl_minutes),
            self.expires_at(session),
        )

    def accepts_backup_code(self, session: AttendanceSession, now: datetime) -> bool:
        return self.is_open(session, now) and now <= self.backup_code_valid_until(session)
