from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import OK_ATTENDANCE_PERCENT, WARNING_ATTENDANCE_PERCENT
from ..core.enums import AttendanceBand


@dataclass(frozen=True)
class StatusThresholds:
    """ok >= ok_percent, warning >= warning_percent, critical below."""

    ok_percent: float = OK_ATTENDANCE_PERCENT
    warning_percent: float = WARNING_ATTENDANCE_PERCENT

    def classify(self, percentage: float) -> AttendanceBand:
        if percentage >= self.ok_percent:
            return AttendanceBand.OK
        if percentage >= self.warning_percent:
            return AttendanceBand.WARNING
        return AttendanceBand.CRITICAL
