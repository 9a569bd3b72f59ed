from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterator, Optional, Sequence

from ..core.constants import ACCEPTED_DATETIME_FORMATS
from ..core.exceptions import DateFormatError, ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc


def now_local(tz: Optional[tzinfo] = None) -> datetime:
    """Current time in ``tz``.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz)


def to_timezone(value: Optional[datetime], tz: tzinfo) -> Optional[datetime]:
    """Normalize a timestamp to ``tz``. Naive values are taken as already local to ``tz``."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def calendar_date_for(value: datetime, tz: tzinfo) -> date:
    return to_timezone(value, tz).date()


def parse_punch_datetime(
    raw: str,
    tz: tzinfo,
    *,
    formats: Sequence[str] = ACCEPTED_DATETIME_FORMATS,
) -> datetime:
    """Parse a raw punch string against the accepted formats (first match wins)."""

    value = (raw or "").strip()
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=tz)
        except ValueError:
            continue
    raise DateFormatError(raw)


def is_valid_punch_datetime(raw: str, *, formats: Sequence[str] = ACCEPTED_DATETIME_FORMATS) -> bool:
    value = (raw or "").strip()
    for fmt in formats:
        try:
            datetime.strptime(value, fmt)
            return True
        except ValueError:
            continue
    return False


def iter_days(start: date, end: date) -> Iterator[date]:
    if end < start:
        raise ValidationError("end date must not be before start date")
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def whole_minutes_between(a: datetime, b: datetime) -> int:
    """Absolute difference in whole minutes (truncated)."""
    return int(abs((a - b).total_seconds()) // 60)
