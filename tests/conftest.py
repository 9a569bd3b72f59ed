from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

import pytest

from attendance_reconciliation.attendance.model import AttendanceKey, DailyAttendanceRecord
from attendance_reconciliation.core.exceptions import PersistenceError
from attendance_reconciliation.core.settings import ReconciliationSettings
from attendance_reconciliation.employees.model import EmployeeIdentity
from attendance_reconciliation.punches.model import RawPunch
from attendance_reconciliation.workflow.model import WorkflowRecord

TZ = ZoneInfo("Asia/Kolkata")


class InMemoryEmployees:
    def __init__(self, identities: Sequence[EmployeeIdentity]):
        self._identities = list(identities)

    def list_identities(self):
        return list(self._identities)

    def list_active_employee_ids(self):
        return sorted(e.employee_id for e in self._identities if e.is_active)


class InMemoryPunches:
    def __init__(self):
        self._rows: dict[int, RawPunch] = {}
        self._id = 0
        self.consumed_calls: list[tuple[tuple[int, ...], int]] = []

    def add(self, punch: RawPunch) -> int:
        self._id += 1
        created_at = punch.created_at or datetime(2024, 1, 1) + timedelta(seconds=self._id)
        self._rows[self._id] = replace(punch, punch_id=self._id, created_at=created_at)
        return self._id

    def all(self) -> list[RawPunch]:
        return [self._rows[k] for k in sorted(self._rows)]

    def get(self, punch_id: int) -> Optional[RawPunch]:
        return self._rows.get(punch_id)

    def list_for_range(self, *, start_date: date, end_date: date):
        rows = [p for p in self._rows.values() if start_date <= p.calendar_date <= end_date]
        rows.sort(key=lambda p: (p.calendar_date, p.employee_id or -1, p.timestamp, p.punch_id))
        return rows

    def list_unresolved(self, *, start_date: date, end_date: date):
        return [p for p in self.list_for_range(start_date=start_date, end_date=end_date) if p.employee_id is None]

    def exists(self, *, employee_id: int, calendar_date: date, timestamp) -> bool:
        return any(p.dedup_key == (employee_id, calendar_date, timestamp) for p in self._rows.values())

    def assign_employee(self, *, punch_id: int, employee_id: int, match_type: Optional[str]) -> bool:
        if punch_id not in self._rows:
            return False
        self._rows[punch_id] = self._rows[punch_id].resolved_to(employee_id, match_type)
        return True

    def mark_consumed(self, *, punch_ids: Sequence[int], attendance_id: int) -> int:
        self.consumed_calls.append((tuple(punch_ids), attendance_id))
        for pid in punch_ids:
            self._rows[pid] = self._rows[pid].consumed_into(attendance_id)
        return len(punch_ids)

    def delete_many(self, punch_ids: Sequence[int]) -> int:
        deleted = 0
        for pid in punch_ids:
            if self._rows.pop(pid, None) is not None:
                deleted += 1
        return deleted


class InMemoryWorkflow:
    def __init__(self, records: Sequence[WorkflowRecord] = ()):
        self.records = list(records)

    def list_for_range(self, *, start_date: date, end_date: date):
        return [r for r in self.records if start_date <= r.work_date <= end_date]


class InMemoryAttendance:
    def __init__(self):
        self._lock = threading.Lock()
        self._rows: dict[int, DailyAttendanceRecord] = {}
        self._id = 0
        self.upserts = 0

    def _find(self, key: AttendanceKey) -> Optional[int]:
        if key.employee_id is None:
            return None
        for attendance_id, r in self._rows.items():
            if (r.employee_id, r.calendar_date) == (key.employee_id, key.calendar_date):
                return attendance_id
        return None

    def upsert(self, key: AttendanceKey, record: DailyAttendanceRecord) -> int:
        with self._lock:
            self.upserts += 1
            attendance_id = self._find(key)
            if attendance_id is None:
                self._id += 1
                attendance_id = self._id
            self._rows[attendance_id] = replace(
                record, employee_id=key.employee_id, calendar_date=key.calendar_date, attendance_id=attendance_id
            )
            return attendance_id

    def get(self, key: AttendanceKey) -> Optional[DailyAttendanceRecord]:
        attendance_id = self._find(key)
        return self._rows[attendance_id] if attendance_id is not None else None

    def all(self) -> list[DailyAttendanceRecord]:
        return [self._rows[k] for k in sorted(self._rows)]

    def list_for_range(self, *, start_date: date, end_date: date):
        rows = [r for r in self._rows.values() if start_date <= r.calendar_date <= end_date]
        rows.sort(key=lambda r: (r.calendar_date, r.employee_id or -1))
        return rows

    def delete_without_employee(self, *, start_date: date, end_date: date) -> int:
        doomed = [
            k for k, r in self._rows.items() if r.employee_id is None and start_date <= r.calendar_date <= end_date
        ]
        for k in doomed:
            del self._rows[k]
        return len(doomed)

    def move_date(self, *, attendance_id: int, new_date: date) -> bool:
        current = self._rows.get(attendance_id)
        if current is None:
            return False
        if self._find(AttendanceKey(current.employee_id, new_date)) is not None:
            raise PersistenceError("Duplicate entry for uq_daily_attendance_employee_date")
        self._rows[attendance_id] = replace(current, calendar_date=new_date)
        return True


@pytest.fixture
def tz():
    return TZ


@pytest.fixture
def at():
    """``at(day, hour, minute)`` -> aware datetime in the organizational timezone."""

    def _at(day: date, hour: int, minute: int = 0, second: int = 0) -> datetime:
        return datetime(day.year, day.month, day.day, hour, minute, second, tzinfo=TZ)

    return _at


@pytest.fixture
def settings():
    return ReconciliationSettings(workers=1)


@pytest.fixture
def directory():
    return [
        EmployeeIdentity(1, "Rishabh", "Kumar", biometric_code="B001"),
        EmployeeIdentity(2, "Amit", "Sharma", biometric_code="B002"),
        EmployeeIdentity(3, "Amit", "Shah", biometric_code="B003"),
        EmployeeIdentity(4, "Priya", "Nair"),
        EmployeeIdentity(5, "Rahul", "Verma"),
        EmployeeIdentity(6, "Rahul", "Gupta"),
        EmployeeIdentity(7, "Neha", "Sharma"),
        EmployeeIdentity(8, "Neha", "Shetty"),
        EmployeeIdentity(9, "Kiran", "Rao", is_active=False),
    ]


@pytest.fixture
def employees_repo(directory):
    return InMemoryEmployees(directory)


@pytest.fixture
def punches_repo():
    return InMemoryPunches()


@pytest.fixture
def workflow_repo():
    return InMemoryWorkflow()


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def make_punch():
    """``make_punch(employee_id, timestamp, **fields)`` -> resolved ``RawPunch`` (``None`` keeps it unresolved)."""

    def _make(employee_id: Optional[int], timestamp: datetime, **fields) -> RawPunch:
        punch = RawPunch.capture(
            raw_identifier=fields.pop("raw_identifier", f"B{employee_id or 0:03d}"),
            raw_name=fields.pop("raw_name", None),
            timestamp=timestamp,
            tz=TZ,
            source_batch_id=fields.pop("source_batch_id", "batch-1"),
            **fields,
        )
        return punch.resolved_to(employee_id, "DIRECT_ID_MATCH") if employee_id is not None else punch

    return _make
