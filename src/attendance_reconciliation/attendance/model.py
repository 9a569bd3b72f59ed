from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import AttendanceStatus, Completeness, MergeCase, Source, VerificationMethod


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class AttendanceKey:
    employee_id: Optional[int]
    calendar_date: date


@dataclass(frozen=True)
class HoursBreakdown:
    worked_hours: float
    regular_hours: float
    overtime_hours: float
    status: AttendanceStatus
    is_present: bool
    completeness: Completeness


@dataclass(frozen=True)
class MergeMetadata:
    """How a daily record was derived: case, winning sources, deltas and the four raw inputs."""

    case: Optional[MergeCase] = None
    remarks: str = ""
    in_source: Optional[Source] = None
    out_source: Optional[Source] = None
    in_diff_minutes: Optional[int] = None
    out_diff_minutes: Optional[int] = None
    wf_in: Optional[datetime] = None
    wf_out: Optional[datetime] = None
    bio_in: Optional[datetime] = None
    bio_out: Optional[datetime] = None
    sequence_error: Optional[str] = None
    punch_count: int = 0

    def with_sequence_error(self, code: str) -> "MergeMetadata":
        return replace(self, sequence_error=code)

    def to_dict(self) -> dict[str, Any]:
        return {
            "case": self.case.value if self.case else None,
            "remarks": self.remarks,
            "in_source": self.in_source.value if self.in_source else None,
            "out_source": self.out_source.value if self.out_source else None,
            "in_diff_minutes": self.in_diff_minutes,
            "out_diff_minutes": self.out_diff_minutes,
            "wf_in": _iso(self.wf_in),
            "wf_out": _iso(self.wf_out),
            "bio_in": _iso(self.bio_in),
            "bio_out": _iso(self.bio_out),
            "sequence_error": self.sequence_error,
            "punch_count": self.punch_count,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["MergeMetadata"]:
        if not data:
            return None
        return cls(
            case=MergeCase(data["case"]) if data.get("case") else None,
            remarks=data.get("remarks") or "",
            in_source=Source(data["in_source"]) if data.get("in_source") else None,
            out_source=Source(data["out_source"]) if data.get("out_source") else None,
            in_diff_minutes=data.get("in_diff_minutes"),
            out_diff_minutes=data.get("out_diff_minutes"),
            wf_in=_from_iso(data.get("wf_in")),
            wf_out=_from_iso(data.get("wf_out")),
            bio_in=_from_iso(data.get("bio_in")),
            bio_out=_from_iso(data.get("bio_out")),
            sequence_error=data.get("sequence_error"),
            punch_count=int(data.get("punch_count") or 0),
        )


@dataclass(frozen=True)
class DailyAttendanceRecord:
    """Authoritative attendance of one employee on one calendar day."""

    employee_id: Optional[int]
    calendar_date: date
    final_in: Optional[datetime]
    final_out: Optional[datetime]
    worked_hours_decimal: float
    regular_hours: float
    overtime_hours: float
    status: AttendanceStatus
    is_present: bool
    verification_method: VerificationMethod = VerificationMethod.AUTO
    merge_metadata: Optional[MergeMetadata] = None
    attendance_id: Optional[int] = None

    @property
    def key(self) -> AttendanceKey:
        return AttendanceKey(self.employee_id, self.calendar_date)

    @property
    def is_locked(self) -> bool:
        """Manual and leave records are owned by people, never by reconciliation."""

        return self.verification_method in (VerificationMethod.MANUAL, VerificationMethod.LEAVE)

    def with_id(self, attendance_id: int) -> "DailyAttendanceRecord":
        return replace(self, attendance_id=attendance_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "attendance_id": self.attendance_id,
            "employee_id": self.employee_id,
            "calendar_date": self.calendar_date.isoformat(),
            "final_in": _iso(self.final_in),
            "final_out": _iso(self.final_out),
            "worked_hours_decimal": self.worked_hours_decimal,
            "regular_hours": self.regular_hours,
            "overtime_hours": self.overtime_hours,
            "status": self.status.value,
            "is_present": self.is_present,
            "verification_method": self.verification_method.value,
            "merge_metadata": self.merge_metadata.to_dict() if self.merge_metadata else None,
        }
