from __future__ import annotations

import logging
import threading
from collections import defaultdict
from datetime import date, datetime
from typing import Callable, Optional

from ..attendance.model import AttendanceKey
from ..attendance.repository import AttendanceRepository
from ..attendance.service import ReconciliationService
from ..audit.service import AuditService
from ..common.datetime_utils import calendar_date_for
from ..core.enums import MigrationStep
from ..core.exceptions import DomainError, ValidationError
from ..core.settings import ReconciliationSettings
from ..employees.repository import EmployeeDirectory
from ..identity.resolver import IdentityResolver
from ..punches.repository import PunchRepository
from .backup import JsonBackupStore
from .model import MigrationSummary, StepResult, StepStatus

DESTRUCTIVE_STEPS = frozenset(
    {MigrationStep.CLEAN, MigrationStep.FIX_IDENTITIES, MigrationStep.DEDUP, MigrationStep.RECONCILE}
)


class MigrationRunner:
    """Cleans historical data and re-runs reconciliation over a date range.

    Steps run in ``MigrationStep`` order. Every step records its own errors and
    a failing record never aborts its step; a failing step never aborts the run,
    except that a failed backup skips every destructive step.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        punches: PunchRepository,
        employees: EmployeeDirectory,
        *,
        reconciliation: ReconciliationService,
        audit: AuditService,
        resolver: IdentityResolver,
        backup: JsonBackupStore,
        settings: Optional[ReconciliationSettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._attendance = attendance
        self._punches = punches
        self._employees = employees
        self._reconciliation = reconciliation
        self._audit = audit
        self._resolver = resolver
        self._backup = backup
        self._settings = settings or ReconciliationSettings()
        self._log = logger or logging.getLogger(__name__)

    def run(
        self,
        start_date: date,
        end_date: date,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> MigrationSummary:
        if end_date < start_date:
            raise ValidationError("end date must not be before start date")

        cancel_event = cancel_event or threading.Event()
        summary = MigrationSummary(start_date=start_date, end_date=end_date)
        handlers: dict[MigrationStep, Callable[[MigrationSummary, StepResult, threading.Event], None]] = {
            MigrationStep.BACKUP: self._backup_step,
            MigrationStep.AUDIT_BEFORE: self._audit_before,
            MigrationStep.CLEAN: self._clean,
            MigrationStep.FIX_IDENTITIES: self._fix_identities,
            MigrationStep.DEDUP: self._dedup,
            MigrationStep.RECONCILE: self._reconcile,
            MigrationStep.AUDIT_AFTER: self._audit_after,
            MigrationStep.VERIFY: self._verify,
        }

        self._log.info("Migration %s..%s started", start_date, end_date)
        backup_failed = False
        for step in MigrationStep:
            result = StepResult(step=step)
            summary.steps.append(result)

            if cancel_event.is_set():
                summary.cancelled = True
                result.status = StepStatus.SKIPPED
                result.details["reason"] = "cancelled"
                continue
            if backup_failed and step in DESTRUCTIVE_STEPS:
                result.status = StepStatus.SKIPPED
                result.details["reason"] = "backup failed"
                self._log.warning("Skipping %s: backup failed", step.value)
                continue

            try:
                handlers[step](summary, result, cancel_event)
            except Exception as exc:
                self._log.exception("Migration step %s failed", step.value)
                result.status = StepStatus.FAILED
                result.errors.append({"error": str(exc)})
                if step == MigrationStep.BACKUP:
                    backup_failed = True
                continue
            self._log.info("Migration step %s: %d", step.value, result.count)

        self._log.info(
            "Migration %s..%s finished: backed up %d, cleaned %d, fixed %d, deduplicated %d, reconciled %d",
            start_date,
            end_date,
            summary.backed_up,
            summary.cleaned,
            summary.fixed,
            summary.deduplicated,
            summary.reconciled,
        )
        return summary

    def _backup_step(self, summary: MigrationSummary, result: StepResult, _cancel: threading.Event) -> None:
        records = list(self._attendance.list_for_range(start_date=summary.start_date, end_date=summary.end_date))
        punches = list(self._punches.list_for_range(start_date=summary.start_date, end_date=summary.end_date))
        path = self._backup.save(
            start_date=summary.start_date, end_date=summary.end_date, records=records, punches=punches
        )
        summary.backup_path = str(path)
        result.count = len(records) + len(punches)
        result.details.update({"records": len(records), "punches": len(punches), "path": str(path)})

    def _audit_before(self, summary: MigrationSummary, result: StepResult, _cancel: threading.Event) -> None:
        report = self._audit.generate_report(summary.start_date, summary.end_date)
        summary.issues_before = report.total_issues
        result.count = report.total_issues
        result.details["report_path"] = report.report_path

    def _clean(self, summary: MigrationSummary, result: StepResult, _cancel: threading.Event) -> None:
        removed = self._attendance.delete_without_employee(start_date=summary.start_date, end_date=summary.end_date)
        moved = 0

        tz = self._settings.timezone
        records = list(self._attendance.list_for_range(start_date=summary.start_date, end_date=summary.end_date))
        taken = {(r.employee_id, r.calendar_date) for r in records}
        for r in records:
            if r.final_in is None or r.is_locked:
                continue
            in_date = calendar_date_for(r.final_in, tz)
            if in_date == r.calendar_date:
                continue
            if (r.employee_id, in_date) in taken or self._attendance.get(AttendanceKey(r.employee_id, in_date)):
                result.errors.append(
                    {
                        "attendance_id": r.attendance_id,
                        "error": f"Cannot move record to {in_date}: a record already exists there",
                    }
                )
                continue
            try:
                self._attendance.move_date(attendance_id=r.attendance_id, new_date=in_date)
            except DomainError as exc:
                self._log.exception("Could not move attendance %s", r.attendance_id)
                result.errors.append({"attendance_id": r.attendance_id, "error": str(exc)})
                continue
            taken.discard((r.employee_id, r.calendar_date))
            taken.add((r.employee_id, in_date))
            moved += 1

        result.count = removed + moved
        result.details.update({"removed_without_employee": removed, "moved_to_in_date": moved})

    def _fix_identities(self, summary: MigrationSummary, result: StepResult, _cancel: threading.Event) -> None:
        unresolved = list(self._punches.list_unresolved(start_date=summary.start_date, end_date=summary.end_date))
        directory = list(self._employees.list_identities())
        batch = self._resolver.resolve_batch(unresolved, directory)

        for punch, resolution in batch.successful:
            try:
                self._punches.assign_employee(
                    punch_id=punch.punch_id,
                    employee_id=resolution.employee_id,
                    match_type=resolution.match_type.value,
                )
            except DomainError as exc:
                self._log.exception("Could not assign punch %s", punch.punch_id)
                result.errors.append({"punch_id": punch.punch_id, "error": str(exc)})
                continue
            result.count += 1

        result.details.update({"attempted": len(unresolved), **batch.summary()})

    def _dedup(self, summary: MigrationSummary, result: StepResult, _cancel: threading.Event) -> None:
        groups = defaultdict(list)
        for p in self._punches.list_for_range(start_date=summary.start_date, end_date=summary.end_date):
            if p.is_resolved:
                groups[p.dedup_key].append(p)

        # Earliest stored punch survives; created_at falls back to punch_id order.
        doomed: list[int] = []
        for items in groups.values():
            if len(items) < 2:
                continue
            items.sort(key=lambda p: (p.created_at or datetime.min, p.punch_id or 0))
            doomed.extend(p.punch_id for p in items[1:] if p.punch_id is not None)

        if doomed:
            result.count = self._punches.delete_many(sorted(doomed))
        result.details["duplicate_groups"] = sum(1 for items in groups.values() if len(items) > 1)

    def _reconcile(self, summary: MigrationSummary, result: StepResult, cancel: threading.Event) -> None:
        run = self._reconciliation.reconcile_range(summary.start_date, summary.end_date, cancel_event=cancel)
        result.count = run.written + run.absent_marked
        result.errors.extend(run.failed)
        result.details.update(
            {
                "written": run.written,
                "absent_marked": run.absent_marked,
                "skipped_locked": run.skipped_locked,
                "sequence_errors": len(run.sequence_errors),
            }
        )
        if run.cancelled:
            summary.cancelled = True

    def _audit_after(self, summary: MigrationSummary, result: StepResult, _cancel: threading.Event) -> None:
        report = self._audit.generate_report(summary.start_date, summary.end_date)
        summary.issues_after = report.total_issues
        result.count = report.total_issues
        result.details["report_path"] = report.report_path

    def _verify(self, summary: MigrationSummary, result: StepResult, _cancel: threading.Event) -> None:
        result.details.update(
            {
                "issues_before": summary.issues_before,
                "issues_after": summary.issues_after,
                "improved": summary.improved,
            }
        )
        if summary.improved is False:
            self._log.warning(
                "Migration did not reduce issues (%s -> %s)", summary.issues_before, summary.issues_after
            )
