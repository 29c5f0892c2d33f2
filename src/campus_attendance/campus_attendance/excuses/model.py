from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ExcuseStatus


@dataclass(frozen=True)
class ExcuseRequest:
    """A student's contest of an absence or flagged check-in. Never deleted."""

    request_id: int
    student_id: int
    session_id: int
    reason: str
    status: ExcuseStatus
    created_at: datetime
    document_ref: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ExcuseStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "studentId": self.student_id,
            "sessionId": self.session_id,
            "reason": self.reason,
            "documentUrl": self.document_ref,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
            "reviewedBy": self.reviewed_by,
            "reviewedAt": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "notes": self.review_notes,
        }
