"""Stateless audit scans.

Each check takes plain domain values and returns a list of ``AuditIssue``;
none of them touches a repository.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import tzinfo
from typing import Iterable, Sequence

from ..attendance.model import DailyAttendanceRecord
from ..common.datetime_utils import calendar_date_for, is_valid_punch_datetime
from ..core.constants import ACCEPTED_DATETIME_FORMATS
from ..core.enums import AttendanceStatus, IssueType, PunchType, Severity, VerificationMethod
from ..punches.grouper import PunchGrouper
from ..punches.model import RawPunch
from .model import AuditIssue

ID_MAPPING = "id_mapping"
DUPLICATE_PUNCHES = "duplicate_punches"
DATE_GROUPING = "date_grouping"
TIMEZONE = "timezone"
PUNCH_SEQUENCE = "punch_sequence"
MULTIPLE_PUNCHES = "multiple_punches"
PUNCH_SELECTION = "punch_selection"
DATE_FORMAT = "date_format"
MISSING_BIOMETRIC = "missing_biometric"


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def _by_employee_day(punches: Iterable[RawPunch]) -> dict:
    groups: dict = defaultdict(list)
    for p in punches:
        if p.is_resolved:
            groups[(p.employee_id, p.calendar_date)].append(p)
    return groups


def check_unresolved_punches(punches: Iterable[RawPunch]) -> list[AuditIssue]:
    return [
        AuditIssue(
            type=IssueType.UNRESOLVED_BIOMETRIC_ID,
            severity=Severity.ERROR,
            message=f"Biometric ID {p.raw_identifier!r} ({p.raw_name or 'no name'}) is not mapped to any employee",
            suggestion="Add the biometric code to the employee directory or map the punch manually",
            calendar_date=p.calendar_date,
            record_ids=(p.punch_id,) if p.punch_id is not None else (),
        )
        for p in punches
        if not p.is_resolved
    ]


def check_duplicate_punches(punches: Iterable[RawPunch]) -> list[AuditIssue]:
    seen: dict = {}
    issues = []
    for p in sorted((p for p in punches if p.is_resolved), key=lambda p: (p.timestamp, p.punch_id or 0)):
        first = seen.get(p.dedup_key)
        if first is None:
            seen[p.dedup_key] = p
            continue
        issues.append(
            AuditIssue(
                type=IssueType.DUPLICATE_PUNCH,
                severity=Severity.WARNING,
                message=f"Duplicate punch at {p.timestamp.isoformat()} for employee {p.employee_id}",
                suggestion="Remove the duplicate punch, keeping the earliest stored one",
                employee_id=p.employee_id,
                calendar_date=p.calendar_date,
                record_ids=tuple(i for i in (first.punch_id, p.punch_id) if i is not None),
            )
        )
    return issues


def check_date_grouping(records: Iterable[DailyAttendanceRecord], tz: tzinfo) -> list[AuditIssue]:
    issues = []
    for r in records:
        if r.final_in is None:
            continue
        in_date = calendar_date_for(r.final_in, tz)
        if in_date != r.calendar_date:
            issues.append(
                AuditIssue(
                    type=IssueType.DATE_MISMATCH,
                    severity=Severity.ERROR,
                    message=f"Record dated {r.calendar_date} but IN time falls on {in_date}",
                    suggestion="Move the record to the date of its IN time",
                    employee_id=r.employee_id,
                    calendar_date=r.calendar_date,
                    record_ids=(r.attendance_id,) if r.attendance_id is not None else (),
                    expected=in_date.isoformat(),
                    actual=r.calendar_date.isoformat(),
                )
            )
    return issues


def check_midnight_crossover(records: Iterable[DailyAttendanceRecord], tz: tzinfo) -> list[AuditIssue]:
    return [
        AuditIssue(
            type=IssueType.MIDNIGHT_CROSSOVER,
            severity=Severity.INFO,
            message="Shift crosses midnight",
            suggestion="Confirm the overnight shift is genuine",
            employee_id=r.employee_id,
            calendar_date=r.calendar_date,
            record_ids=(r.attendance_id,) if r.attendance_id is not None else (),
        )
        for r in records
        if r.final_in is not None
        and r.final_out is not None
        and r.final_out >= r.final_in
        and calendar_date_for(r.final_in, tz) != calendar_date_for(r.final_out, tz)
    ]


def check_punch_sequence(records: Iterable[DailyAttendanceRecord]) -> list[AuditIssue]:
    return [
        AuditIssue(
            type=IssueType.OUT_OF_ORDER_PUNCH_SEQUENCE,
            severity=Severity.ERROR,
            message=f"OUT {r.final_out.isoformat()} precedes IN {r.final_in.isoformat()}",
            suggestion="Review the source times and correct the record manually",
            employee_id=r.employee_id,
            calendar_date=r.calendar_date,
            record_ids=(r.attendance_id,) if r.attendance_id is not None else (),
        )
        for r in records
        if r.final_in is not None and r.final_out is not None and r.final_out < r.final_in
    ]


def check_multiple_punches(punches: Iterable[RawPunch]) -> list[AuditIssue]:
    issues = []
    for (employee_id, day), group in sorted(_by_employee_day(punches).items()):
        for direction, issue_type in ((PunchType.IN, IssueType.MULTIPLE_IN_PUNCHES), (PunchType.OUT, IssueType.MULTIPLE_OUT_PUNCHES)):
            typed = [p for p in group if p.punch_type == direction]
            if len(typed) > 1:
                issues.append(
                    AuditIssue(
                        type=issue_type,
                        severity=Severity.WARNING,
                        message=f"{len(typed)} {direction.value} punches for employee {employee_id} on {day}",
                        suggestion=f"The {'earliest' if direction == PunchType.IN else 'latest'} one is used",
                        employee_id=employee_id,
                        calendar_date=day,
                        record_ids=tuple(p.punch_id for p in typed if p.punch_id is not None),
                    )
                )
    return issues


def check_punch_selection(
    records: Iterable[DailyAttendanceRecord],
    punches: Iterable[RawPunch],
    grouper: PunchGrouper,
) -> list[AuditIssue]:
    """Stored biometric IN/OUT must be the punches the grouper would select today."""

    groups = _by_employee_day(punches)
    issues = []
    for r in records:
        meta = r.merge_metadata
        group = groups.get((r.employee_id, r.calendar_date))
        if meta is None or not group or r.is_locked:
            continue
        expected = grouper.select(r.employee_id, r.calendar_date, group)
        checks = (
            (IssueType.INCORRECT_IN_PUNCH_SELECTION, "IN", "earliest", expected.bio_in, meta.bio_in),
            (IssueType.INCORRECT_OUT_PUNCH_SELECTION, "OUT", "latest", expected.bio_out, meta.bio_out),
        )
        for issue_type, label, rule, want, got in checks:
            if want != got:
                issues.append(
                    AuditIssue(
                        type=issue_type,
                        severity=Severity.ERROR,
                        message=f"Biometric {label} is not the {rule} punch of the day",
                        suggestion="Re-run reconciliation for this date",
                        employee_id=r.employee_id,
                        calendar_date=r.calendar_date,
                        record_ids=(r.attendance_id,) if r.attendance_id is not None else (),
                        expected=_iso(want),
                        actual=_iso(got),
                    )
                )
    return issues


def check_date_formats(punches: Iterable[RawPunch], formats: Sequence[str] = ACCEPTED_DATETIME_FORMATS) -> list[AuditIssue]:
    return [
        AuditIssue(
            type=IssueType.INVALID_DATE_FORMAT,
            severity=Severity.ERROR,
            message=f"Unrecognised date-time {p.raw_timestamp!r}",
            suggestion="Use one of the accepted formats, e.g. YYYY-MM-DD HH:MM:SS",
            employee_id=p.employee_id,
            calendar_date=p.calendar_date,
            record_ids=(p.punch_id,) if p.punch_id is not None else (),
            actual=p.raw_timestamp,
        )
        for p in punches
        if p.raw_timestamp and not is_valid_punch_datetime(p.raw_timestamp, formats=formats)
    ]


def check_missing_biometric(records: Iterable[DailyAttendanceRecord]) -> list[AuditIssue]:
    issues = []
    for r in records:
        if r.status != AttendanceStatus.ABSENT or r.verification_method == VerificationMethod.LEAVE:
            continue
        meta = r.merge_metadata
        if meta is not None and any(v is not None for v in (meta.wf_in, meta.wf_out, meta.bio_in, meta.bio_out)):
            continue
        issues.append(
            AuditIssue(
                type=IssueType.MISSING_BIOMETRIC_MARKED_ABSENT,
                severity=Severity.INFO,
                message=f"Employee {r.employee_id} marked absent on {r.calendar_date} with no punch or workflow data",
                suggestion="Check device uploads or record leave",
                employee_id=r.employee_id,
                calendar_date=r.calendar_date,
                record_ids=(r.attendance_id,) if r.attendance_id is not None else (),
            )
        )
    return issues
