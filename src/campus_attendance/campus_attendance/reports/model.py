from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import AttendanceBand
from ..users.model import Student


@dataclass(frozen=True)
class AttendanceSummary:
    """Derived view for one student in one section; always recomputed, never stored."""

    section_id: int
    student_id: int
    total_sessions: int
    attended_sessions: int
    excused_sessions: int
    absent_sessions: int
    attendance_percentage: float
    status: AttendanceBand
    flagged_count: int

    def to_dict(self) -> dict:
        return {
            "sectionId": self.section_id,
            "studentId": self.student_id,
            "totalSessions": self.total_sessions,
            "attendedSessions": self.attended_sessions,
            "excusedSessions": self.excused_sessions,
            "absentSessions": self.absent_sessions,
            "attendancePercentage": round(self.attendance_percentage, 2),
            "status": self.status.value,
            "flaggedCount": self.flagged_count,
        }


@dataclass(frozen=True)
class SectionReportRow:
    student: Student
    summary: AttendanceSummary

    def to_dict(self) -> dict:
        return {
            "student": {
                "id": self.student.user_id,
                "studentNumber": self.student.student_number,
                "firstName": self.student.first_name,
                "lastName": self.student.last_name,
                "email": self.student.email,
            },
            "attendance": self.summary.to_dict(),
        }
