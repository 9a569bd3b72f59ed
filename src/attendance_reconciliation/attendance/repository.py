from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceKey, DailyAttendanceRecord


class AttendanceRepository(Protocol):
    def upsert(self, key: AttendanceKey, record: DailyAttendanceRecord) -> int:
        """Insert or overwrite the record stored under ``key`` atomically; return its id."""

        raise NotImplementedError

    def get(self, key: AttendanceKey) -> Optional[DailyAttendanceRecord]:
        raise NotImplementedError

    def list_for_range(self, *, start_date: date, end_date: date) -> Sequence[DailyAttendanceRecord]:
        raise NotImplementedError

    def delete_without_employee(self, *, start_date: date, end_date: date) -> int:
        raise NotImplementedError

    def move_date(self, *, attendance_id: int, new_date: date) -> bool:
        raise NotImplementedError
