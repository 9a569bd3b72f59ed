from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from ..common.datetime_utils import iter_days
from ..core.enums import Source, VerificationMethod
from ..core.exceptions import SequenceError, ValidationError
from ..core.settings import ReconciliationSettings
from ..employees.repository import EmployeeDirectory
from ..punches.grouper import PunchGrouper
from ..punches.model import PunchGroup
from ..punches.repository import PunchRepository
from ..workflow.model import WorkflowRecord
from ..workflow.repository import WorkflowRepository
from .calculator.base import HoursCalculator
from .calculator.standard_calculator import ABSENT_BREAKDOWN, StandardHoursCalculator
from .merge.engine import MergeEngine
from .merge.factory import MergeStrategyFactory
from .model import AttendanceKey, DailyAttendanceRecord, MergeMetadata
from .repository import AttendanceRepository

NO_DATA_REMARK = "NO_DATA"


@dataclass
class ReconciliationResult:
    start_date: date
    end_date: date
    processed: int = 0
    written: int = 0
    absent_marked: int = 0
    skipped_locked: int = 0
    sequence_errors: list[dict] = field(default_factory=list)
    anomalies: list[dict] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return not self.failed and not self.cancelled

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start_date.isoformat(),
            "end": self.end_date.isoformat(),
            "processed": self.processed,
            "written": self.written,
            "absent_marked": self.absent_marked,
            "skipped_locked": self.skipped_locked,
            "sequence_errors": list(self.sequence_errors),
            "anomalies": list(self.anomalies),
            "failed": list(self.failed),
            "cancelled": self.cancelled,
            "success": self.success,
        }


@dataclass(frozen=True)
class _DayOutcome:
    key: AttendanceKey
    written: bool = False
    skipped_locked: bool = False
    sequence_error: Optional[str] = None
    anomalies: tuple = ()


class ReconciliationService:
    """Rebuilds daily attendance records for a date range from punches and workflow data.

    Each employee-day is independent and written with one atomic upsert, so a
    cancelled or partially failed run leaves every written day intact and a
    rerun over the same inputs produces identical records.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        punches: PunchRepository,
        workflow: WorkflowRepository,
        employees: EmployeeDirectory,
        *,
        settings: Optional[ReconciliationSettings] = None,
        grouper: Optional[PunchGrouper] = None,
        engine: Optional[MergeEngine] = None,
        calculator: Optional[HoursCalculator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._attendance = attendance
        self._punches = punches
        self._workflow = workflow
        self._employees = employees
        self._settings = settings or ReconciliationSettings()
        self._log = logger or logging.getLogger(__name__)
        self._grouper = grouper or PunchGrouper(
            min_separation_minutes=self._settings.min_punch_separation_minutes, logger=self._log
        )
        self._engine = engine or MergeEngine(
            factory=MergeStrategyFactory(
                tolerance_minutes=self._settings.tolerance_minutes,
                mismatch_in_source=self._settings.mismatch_in_source,
                mismatch_out_source=self._settings.mismatch_out_source,
            ),
            tz=self._settings.timezone,
            logger=self._log,
        )
        self._calculator = calculator or StandardHoursCalculator(
            standard_shift_hours=self._settings.standard_shift_hours,
            min_required_hours=self._settings.min_required_hours,
        )

    def reconcile_range(
        self,
        start_date: date,
        end_date: date,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> ReconciliationResult:
        if end_date < start_date:
            raise ValidationError("end date must not be before start date")

        cancel_event = cancel_event or threading.Event()
        result = ReconciliationResult(start_date=start_date, end_date=end_date)

        groups = {
            (g.employee_id, g.calendar_date): g
            for g in self._grouper.group(self._punches.list_for_range(start_date=start_date, end_date=end_date))
        }
        workflow = {
            (w.employee_id, w.work_date): w
            for w in self._workflow.list_for_range(start_date=start_date, end_date=end_date)
        }
        existing = {
            (r.employee_id, r.calendar_date): r
            for r in self._attendance.list_for_range(start_date=start_date, end_date=end_date)
        }

        keys = sorted(set(groups) | set(workflow))
        self._log.info("Reconciling %d employee-day(s) between %s and %s", len(keys), start_date, end_date)

        with ThreadPoolExecutor(max_workers=self._settings.workers) as pool:
            futures = [
                (
                    key,
                    pool.submit(
                        self._reconcile_day,
                        AttendanceKey(*key),
                        groups.get(key),
                        workflow.get(key),
                        existing.get(key),
                        cancel_event,
                    ),
                )
                for key in keys
            ]
            for (employee_id, day), future in futures:
                try:
                    outcome = future.result()
                except Exception as exc:
                    self._log.exception("Reconciliation failed for employee %s on %s", employee_id, day)
                    result.failed.append(
                        {"employee_id": employee_id, "date": day.isoformat(), "error": str(exc)}
                    )
                    continue
                self._collect(result, outcome)

        result.cancelled = cancel_event.is_set()
        if not result.cancelled:
            self._mark_absent(result, covered=set(keys), existing=existing, cancel_event=cancel_event)
            result.cancelled = cancel_event.is_set()

        self._log.info(
            "Reconciliation %s..%s done: %d written, %d absent, %d locked, %d sequence error(s), %d failed%s",
            start_date,
            end_date,
            result.written,
            result.absent_marked,
            result.skipped_locked,
            len(result.sequence_errors),
            len(result.failed),
            " (cancelled)" if result.cancelled else "",
        )
        return result

    def _collect(self, result: ReconciliationResult, outcome: Optional[_DayOutcome]) -> None:
        if outcome is None:
            return
        result.processed += 1
        day = {"employee_id": outcome.key.employee_id, "date": outcome.key.calendar_date.isoformat()}
        if outcome.skipped_locked:
            result.skipped_locked += 1
        if outcome.written:
            result.written += 1
        if outcome.sequence_error:
            result.sequence_errors.append({**day, "error": outcome.sequence_error})
        for anomaly in outcome.anomalies:
            result.anomalies.append(
                {**day, "type": anomaly.type.value, "severity": anomaly.severity.value, "message": anomaly.message}
            )

    def _reconcile_day(
        self,
        key: AttendanceKey,
        group: Optional[PunchGroup],
        workflow: Optional[WorkflowRecord],
        existing: Optional[DailyAttendanceRecord],
        cancel_event: threading.Event,
    ) -> Optional[_DayOutcome]:
        if cancel_event.is_set():
            return None
        if existing is not None and existing.is_locked:
            self._log.debug("Keeping %s record for %s", existing.verification_method.value, key)
            return _DayOutcome(key=key, skipped_locked=True)

        merged = self._engine.merge(
            key.employee_id,
            key.calendar_date,
            wf_in=workflow.start_time if workflow else None,
            wf_out=workflow.end_time if workflow else None,
            bio_in=group.bio_in if group else None,
            bio_out=group.bio_out if group else None,
        )
        metadata = merged.metadata(punch_count=len(group.punches) if group else 0)

        sequence_error = None
        try:
            hours = self._calculator.calculate(merged.final_in, merged.final_out)
        except SequenceError as exc:
            self._log.warning("Sequence error for employee %s on %s: %s", key.employee_id, key.calendar_date, exc)
            hours = ABSENT_BREAKDOWN
            sequence_error = exc.code
            metadata = metadata.with_sequence_error(exc.code)

        uses_biometric = Source.BIOMETRIC in (merged.in_source, merged.out_source)
        record = DailyAttendanceRecord(
            employee_id=key.employee_id,
            calendar_date=key.calendar_date,
            final_in=merged.final_in,
            final_out=merged.final_out,
            worked_hours_decimal=hours.worked_hours,
            regular_hours=hours.regular_hours,
            overtime_hours=hours.overtime_hours,
            status=hours.status,
            is_present=hours.is_present,
            verification_method=VerificationMethod.BIOMETRIC if uses_biometric else VerificationMethod.AUTO,
            merge_metadata=metadata,
        )
        attendance_id = self._attendance.upsert(key, record)
        if group is not None:
            self._punches.mark_consumed(punch_ids=group.punch_ids, attendance_id=attendance_id)

        return _DayOutcome(
            key=key,
            written=True,
            sequence_error=sequence_error,
            anomalies=tuple(self._engine.detect_anomalies(merged)),
        )

    def _mark_absent(
        self,
        result: ReconciliationResult,
        *,
        covered: set,
        existing: dict,
        cancel_event: threading.Event,
    ) -> None:
        """Every active employee without any data on a day gets an Absent record."""

        active = self._employees.list_active_employee_ids()
        for day in iter_days(result.start_date, result.end_date):
            if self._settings.mark_absent_skip_weekends and day.weekday() >= 5:
                continue
            for employee_id in active:
                if cancel_event.is_set():
                    return
                key = (employee_id, day)
                if key in covered:
                    continue
                current = existing.get(key)
                if current is not None and current.is_locked:
                    result.skipped_locked += 1
                    continue
                try:
                    self._attendance.upsert(AttendanceKey(employee_id, day), absent_record(employee_id, day))
                except Exception as exc:
                    self._log.exception("Could not mark employee %s absent on %s", employee_id, day)
                    result.failed.append({"employee_id": employee_id, "date": day.isoformat(), "error": str(exc)})
                    continue
                result.absent_marked += 1


def absent_record(employee_id: int, day: date) -> DailyAttendanceRecord:
    return DailyAttendanceRecord(
        employee_id=employee_id,
        calendar_date=day,
        final_in=None,
        final_out=None,
        worked_hours_decimal=ABSENT_BREAKDOWN.worked_hours,
        regular_hours=ABSENT_BREAKDOWN.regular_hours,
        overtime_hours=ABSENT_BREAKDOWN.overtime_hours,
        status=ABSENT_BREAKDOWN.status,
        is_present=False,
        verification_method=VerificationMethod.AUTO,
        merge_metadata=MergeMetadata(remarks=NO_DATA_REMARK),
    )
