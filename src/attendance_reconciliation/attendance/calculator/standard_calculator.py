from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.constants import DEFAULT_MIN_REQUIRED_HOURS, DEFAULT_STANDARD_SHIFT_HOURS
from ...core.enums import AttendanceStatus, Completeness
from ...core.exceptions import SequenceError
from ..model import HoursBreakdown
from .base import HoursCalculator

ABSENT_BREAKDOWN = HoursBreakdown(
    worked_hours=0.0,
    regular_hours=0.0,
    overtime_hours=0.0,
    status=AttendanceStatus.ABSENT,
    is_present=False,
    completeness=Completeness.INCOMPLETE,
)


class StandardHoursCalculator(HoursCalculator):
    """Standard rule: hours = (out - in) rounded to 2 decimals, split at the standard shift.

    Status: >= standard shift Present, >= minimum required Half Day, any other
    non-zero span Late, zero Absent.
    """

    def __init__(
        self,
        *,
        standard_shift_hours: float = DEFAULT_STANDARD_SHIFT_HOURS,
        min_required_hours: float = DEFAULT_MIN_REQUIRED_HOURS,
    ):
        self._standard = float(standard_shift_hours)
        self._min_required = float(min_required_hours)

    def status_for(self, total_hours: float) -> AttendanceStatus:
        if total_hours >= self._standard:
            return AttendanceStatus.PRESENT
        if total_hours >= self._min_required:
            return AttendanceStatus.HALF_DAY
        if total_hours > 0:
            return AttendanceStatus.LATE
        return AttendanceStatus.ABSENT

    def calculate(self, final_in: Optional[datetime], final_out: Optional[datetime]) -> HoursBreakdown:
        if final_in is None or final_out is None:
            return ABSENT_BREAKDOWN
        if final_out < final_in:
            raise SequenceError(f"OUT {final_out.isoformat()} precedes IN {final_in.isoformat()}")

        total = round((final_out - final_in).total_seconds() / 3600, 2)
        regular = min(total, self._standard)
        overtime = round(max(0.0, total - self._standard), 2)
        status = self.status_for(total)

        return HoursBreakdown(
            worked_hours=total,
            regular_hours=regular,
            overtime_hours=overtime,
            status=status,
            is_present=status in (AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY),
            completeness=Completeness.COMPLETE,
        )
