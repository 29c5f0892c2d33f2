from __future__ import annotations

from datetime import date, datetime, time

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid date (YYYY-MM-DD)")


def parse_hhmm(value: str) -> time:
    """Parse HH:MM (or HH:MM:SS) wall-clock string into time."""
    v = (value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError("Invalid time (HH:MM)")
