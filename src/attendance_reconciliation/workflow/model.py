from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class WorkflowRecord:
    """Self-reported clock-in/out of one employee-day."""

    employee_id: int
    work_date: date
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def is_complete(self) -> bool:
        return self.start_time is not None and self.end_time is not None
