from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import RawPunch


class PunchRepository(Protocol):
    def add(self, punch: RawPunch) -> int:
        raise NotImplementedError

    def list_for_range(self, *, start_date: date, end_date: date) -> Sequence[RawPunch]:
        """All punches (resolved or not) whose calendar date falls in the range."""

        raise NotImplementedError

    def list_unresolved(self, *, start_date: date, end_date: date) -> Sequence[RawPunch]:
        raise NotImplementedError

    def exists(self, *, employee_id: int, calendar_date: date, timestamp) -> bool:
        raise NotImplementedError

    def assign_employee(self, *, punch_id: int, employee_id: int, match_type: Optional[str]) -> bool:
        raise NotImplementedError

    def mark_consumed(self, *, punch_ids: Sequence[int], attendance_id: int) -> int:
        raise NotImplementedError

    def delete_many(self, punch_ids: Sequence[int]) -> int:
        raise NotImplementedError
