from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..core.enums import Priority
from ..core.exceptions import ValidationError
from ..core.settings import ReconciliationSettings
from ..employees.repository import EmployeeDirectory
from ..punches.grouper import PunchGrouper
from ..punches.repository import PunchRepository
from . import checks
from .model import AuditReport, Recommendation

_PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}

# category -> (title, priority, fixes)
_RECOMMENDATIONS = {
    checks.ID_MAPPING: (
        "ID Mapping",
        Priority.HIGH,
        (
            "Re-run identity resolution for unresolved punches",
            "Manually map ambiguous biometric IDs to employees",
            "Add missing biometric codes to the employee directory",
            "Review employee name format for better matching",
        ),
    ),
    checks.DUPLICATE_PUNCHES: (
        "Duplicate Punches",
        Priority.HIGH,
        ("Remove duplicate punch records", "Run the migration dedup step before reconciling"),
    ),
    checks.DATE_GROUPING: (
        "Timezone",
        Priority.HIGH,
        (
            "Standardize all timestamps to the organizational timezone",
            "Check biometric device timezone settings",
            "Move records to the date of their IN time",
        ),
    ),
    checks.PUNCH_SEQUENCE: (
        "Punch Sequence",
        Priority.HIGH,
        ("Correct records whose OUT precedes IN manually", "Check device clocks for drift"),
    ),
    checks.PUNCH_SELECTION: (
        "Punch Selection",
        Priority.MEDIUM,
        ("Re-run reconciliation for the affected dates",),
    ),
    checks.DATE_FORMAT: (
        "Date Format",
        Priority.MEDIUM,
        ("Fix the export format of the biometric device", "Re-upload the affected rows"),
    ),
    checks.MISSING_BIOMETRIC: (
        "Missing Data",
        Priority.MEDIUM,
        (
            "Check biometric device logs for upload failures",
            "Request manual attendance entries for missing days",
            "Review leave records for that period",
        ),
    ),
    checks.MULTIPLE_PUNCHES: (
        "Multiple Punches",
        Priority.LOW,
        ("Review device direction settings",),
    ),
    checks.TIMEZONE: (
        "Overnight Shifts",
        Priority.LOW,
        ("Confirm overnight shifts with the employee's manager",),
    ),
}


class AuditService:
    """Runs every audit check over a date range and aggregates the findings."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        punches: PunchRepository,
        employees: EmployeeDirectory,
        *,
        settings: Optional[ReconciliationSettings] = None,
        report_dir: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._attendance = attendance
        self._punches = punches
        self._employees = employees
        self._settings = settings or ReconciliationSettings()
        self._report_dir = report_dir or None
        self._log = logger or logging.getLogger(__name__)
        self._grouper = PunchGrouper(min_separation_minutes=self._settings.min_punch_separation_minutes, logger=self._log)

    def generate_report(self, start_date: date, end_date: date, *, write_file: bool = True) -> AuditReport:
        if end_date < start_date:
            raise ValidationError("end date must not be before start date")

        tz = self._settings.timezone
        records = list(self._attendance.list_for_range(start_date=start_date, end_date=end_date))
        punches = list(self._punches.list_for_range(start_date=start_date, end_date=end_date))
        employees = list(self._employees.list_identities())

        report = AuditReport(
            start_date=start_date,
            end_date=end_date,
            generated_at=now_local(tz),
            summary={
                "total_attendance_records": len(records),
                "total_biometric_punches": len(punches),
                "total_employees": len(employees),
            },
            issues={
                checks.ID_MAPPING: checks.check_unresolved_punches(punches),
                checks.DUPLICATE_PUNCHES: checks.check_duplicate_punches(punches),
                checks.DATE_GROUPING: checks.check_date_grouping(records, tz),
                checks.TIMEZONE: checks.check_midnight_crossover(records, tz),
                checks.PUNCH_SEQUENCE: checks.check_punch_sequence(records),
                checks.MULTIPLE_PUNCHES: checks.check_multiple_punches(punches),
                checks.PUNCH_SELECTION: checks.check_punch_selection(records, punches, self._grouper),
                checks.DATE_FORMAT: checks.check_date_formats(punches),
                checks.MISSING_BIOMETRIC: checks.check_missing_biometric(records),
            },
        )

        for category, items in report.issues.items():
            if items:
                self._log.warning("Audit %s..%s: %d %s issue(s)", start_date, end_date, len(items), category)
        self._log.info("Audit %s..%s found %d issue(s)", start_date, end_date, report.total_issues)

        if write_file and self._report_dir:
            report.report_path = str(self._write(report))
        return report

    def _write(self, report: AuditReport) -> Path:
        directory = Path(self._report_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"audit-report-{report.generated_at.strftime('%Y-%m-%d-%H%M%S')}.json"
        path.write_text(json.dumps(report.to_dict(), indent=2, default=str), encoding="utf-8")
        self._log.info("Audit report saved: %s", path)
        return path

    def generate_fix_recommendations(self, report: AuditReport) -> list[Recommendation]:
        recommendations = [
            Recommendation(category=title, priority=priority, issue_count=report.count(category), fixes=fixes)
            for category, (title, priority, fixes) in _RECOMMENDATIONS.items()
            if report.count(category)
        ]
        return sorted(recommendations, key=lambda r: _PRIORITY_ORDER[r.priority])
