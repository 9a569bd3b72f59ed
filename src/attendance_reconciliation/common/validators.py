from __future__ import annotations

from datetime import date

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_date_range(start: str, end: str) -> tuple[date, date]:
    """Parse and validate an inclusive YYYY-MM-DD range."""

    start_date = parse_iso_date(require_non_empty(start, "start"))
    end_date = parse_iso_date(require_non_empty(end, "end"))
    if end_date < start_date:
        raise ValidationError("end must not be before start")
    return start_date, end_date
