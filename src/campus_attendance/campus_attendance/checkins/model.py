from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.geo import Coordinate
from ..common.validators import require_latitude, require_longitude, require_number
from ..core.enums import CheckInOutcome, CheckInStatus


@dataclass(frozen=True)
class ReportedCoordinates:
    """Location as reported by the client device.

    ``accuracy_m`` is stored for audit only; any value (including zero or
    negative) is accepted.
    """

    latitude: float
    longitude: float
    accuracy_m: Optional[float] = None

    @classmethod
    def parse(cls, latitude, longitude, accuracy=None) -> "ReportedCoordinates":
        return cls(
            latitude=require_latitude(latitude),
            longitude=require_longitude(longitude),
            accuracy_m=None if accuracy is None else require_number(accuracy, "accuracy"),
        )

    def validated(self) -> "ReportedCoordinates":
        return ReportedCoordinates.parse(self.latitude, self.longitude, self.accuracy_m)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


@dataclass(frozen=True)
class CheckIn:
    """Domain entity: one student's attendance attempt for one session. Immutable."""

    checkin_id: int
    session_id: int
    student_id: int
    submitted_at: datetime
    reported: ReportedCoordinates
    distance_m: float
    outcome: CheckInOutcome
    status: CheckInStatus = CheckInStatus.PRESENT

    @property
    def is_flagged(self) -> bool:
        return self.outcome == CheckInOutcome.FLAGGED

    def to_dict(self) -> dict:
        return {
            "id": self.checkin_id,
            "sessionId": self.session_id,
            "studentId": self.student_id,
            "submittedAt": self.submitted_at.isoformat(),
            "latitude": self.reported.latitude,
            "longitude": self.reported.longitude,
            "accuracy": self.reported.accuracy_m,
            "distance": round(self.distance_m, 2),
            "outcome": self.outcome.value,
            "status": self.status.value,
            "isFlagged": self.is_flagged,
        }
