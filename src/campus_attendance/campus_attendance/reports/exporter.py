from __future__ import annotations

import csv
import io
from typing import Iterable

from ..core.enums import AttendanceBand
from .model import SectionReportRow

HEADERS = [
    "Student Number",
    "Name",
    "Email",
    "Total Sessions",
    "Attended",
    "Excused",
    "Absent",
    "Percentage",
    "Status",
    "Flagged",
]

STATUS_LABELS = {
    AttendanceBand.OK: "OK",
    AttendanceBand.WARNING: "Warning",
    AttendanceBand.CRITICAL: "Critical",
}


class ReportExporter:
    """Render section report rows as delimited text for download."""

    def __init__(self, *, delimiter: str = ","):
        self._delimiter = delimiter

    def to_row(self, item: SectionReportRow) -> list:
        s = item.summary
        return [
            item.student.student_number or "N/A",
            item.student.full_name,
            item.student.email,
            s.total_sessions,
            s.attended_sessions,
            s.excused_sessions,
            s.absent_sessions,
            f"{s.attendance_percentage:.1f}%",
            STATUS_LABELS[s.status],
            s.flagged_count,
        ]

    def export_csv(self, rows: Iterable[SectionReportRow]) -> str:
        out = io.StringIO()
        writer = csv.writer(out, delimiter=self._delimiter, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(HEADERS)
        for item in rows:
            writer.writerow(self.to_row(item))
        return out.getvalue()
