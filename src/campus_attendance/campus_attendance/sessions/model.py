from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.geo import Coordinate
from ..core.enums import SessionStatus


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: a time-boxed, geofenced attendance window for one section."""

    session_id: int
    section_id: int
    session_date: date
    start_time: time
    end_time: time
    status: SessionStatus
    geofence_radius_m: float
    anchor: Coordinate
    backup_code: str
    created_by: int
    created_at: datetime
    closed_at: Optional[datetime] = None

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.session_date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.session_date, self.end_time)

    def to_dict(self) -> dict:
        return {
            "id": self.session_id,
            "sectionId": self.section_id,
            "date": self.session_date.isoformat(),
            "startTime": self.start_time.strftime("%H:%M"),
            "endTime": self.end_time.strftime("%H:%M"),
            "status": self.status.value,
            "geofenceRadius": self.geofence_radius_m,
            "latitude": self.anchor.latitude,
            "longitude": self.anchor.longitude,
            "backupCode": self.backup_code,
            "createdBy": self.created_by,
            "createdAt": self.created_at.isoformat(),
            "closedAt": self.closed_at.isoformat() if self.closed_at else None,
        }
