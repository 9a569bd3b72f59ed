from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, tzinfo
from typing import Optional

from ..common.datetime_utils import calendar_date_for, to_timezone
from ..core.enums import PunchType


@dataclass(frozen=True)
class RawPunch:
    """One biometric device event.

    Captured fields never change after ingestion; identity resolution and
    reconciliation only add annotations (``employee_id``, ``is_processed``, ...),
    producing a new value each time.
    """

    raw_identifier: str
    timestamp: datetime
    calendar_date: date
    source_batch_id: str = ""
    raw_name: Optional[str] = None
    raw_timestamp: Optional[str] = None
    device_id: Optional[str] = None
    location: Optional[str] = None
    punch_type: PunchType = PunchType.UNKNOWN
    punch_id: Optional[int] = None
    employee_id: Optional[int] = None
    match_type: Optional[str] = None
    is_processed: bool = False
    consumed_by_attendance_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def capture(
        cls,
        *,
        raw_identifier: str,
        timestamp: datetime,
        tz: tzinfo,
        raw_name: Optional[str] = None,
        source_batch_id: str = "",
        **extra,
    ) -> "RawPunch":
        local = to_timezone(timestamp, tz)
        return cls(
            raw_identifier=raw_identifier or "",
            timestamp=local,
            calendar_date=calendar_date_for(local, tz),
            raw_name=raw_name,
            source_batch_id=source_batch_id,
            **extra,
        )

    @property
    def is_resolved(self) -> bool:
        return self.employee_id is not None

    @property
    def dedup_key(self) -> tuple[Optional[int], date, datetime]:
        return (self.employee_id, self.calendar_date, self.timestamp)

    def resolved_to(self, employee_id: int, match_type: Optional[str] = None) -> "RawPunch":
        return replace(self, employee_id=employee_id, match_type=match_type, is_processed=False)

    def consumed_into(self, attendance_id: int) -> "RawPunch":
        return replace(self, is_processed=True, consumed_by_attendance_id=attendance_id)

    def to_dict(self) -> dict:
        return {
            "punch_id": self.punch_id,
            "raw_identifier": self.raw_identifier,
            "raw_name": self.raw_name,
            "raw_timestamp": self.raw_timestamp,
            "timestamp": self.timestamp.isoformat(),
            "calendar_date": self.calendar_date.isoformat(),
            "source_batch_id": self.source_batch_id,
            "device_id": self.device_id,
            "location": self.location,
            "punch_type": self.punch_type.value,
            "employee_id": self.employee_id,
            "match_type": self.match_type,
            "is_processed": self.is_processed,
            "consumed_by_attendance_id": self.consumed_by_attendance_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class PunchGroup:
    """All active punches of one employee on one calendar day, oldest first."""

    employee_id: int
    calendar_date: date
    punches: tuple[RawPunch, ...]
    in_punch: Optional[RawPunch]
    out_punch: Optional[RawPunch]
    duplicates_collapsed: int = 0

    @property
    def bio_in(self) -> Optional[datetime]:
        return self.in_punch.timestamp if self.in_punch else None

    @property
    def bio_out(self) -> Optional[datetime]:
        return self.out_punch.timestamp if self.out_punch else None

    @property
    def punch_ids(self) -> list[int]:
        return [p.punch_id for p in self.punches if p.punch_id is not None]
