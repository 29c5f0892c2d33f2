from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles supplied by the identity collaborator."""

    STUDENT = "student"
    FACULTY = "faculty"
    ADMIN = "admin"
    STAFF = "staff"


class SessionStatus(str, Enum):
    """Attendance session lifecycle. EXPIRED is usually derived, not stored."""

    ACTIVE = "active"
    CLOSED = "closed"
    EXPIRED = "expired"


class CheckInOutcome(str, Enum):
    ACCEPTED = "accepted"
    FLAGGED = "flagged"


class CheckInStatus(str, Enum):
    PRESENT = "present"


class ExcuseStatus(str, Enum):
    """Excuse request review flow."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class AttendanceBand(str, Enum):
    """Status band of an attendance summary."""

    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
