from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from ..core.constants import DEFAULT_MIN_PUNCH_SEPARATION_MINUTES
from .model import PunchGroup, RawPunch


def collapse_duplicates(punches: Iterable[RawPunch]) -> tuple[list[RawPunch], int]:
    """Drop punches repeating an earlier ``(employee_id, calendar_date, timestamp)`` key.

    The first occurrence in ``(timestamp, punch_id)`` order is kept.
    """

    kept: list[RawPunch] = []
    seen: set = set()
    dropped = 0
    for punch in sorted(punches, key=_punch_order):
        if punch.dedup_key in seen:
            dropped += 1
            continue
        seen.add(punch.dedup_key)
        kept.append(punch)
    return kept, dropped


def _punch_order(punch: RawPunch):
    return (punch.timestamp, punch.punch_id if punch.punch_id is not None else -1)


class PunchGrouper:
    """Groups resolved punches per employee-day and picks the IN/OUT candidates.

    Earliest punch is the IN candidate and latest is the OUT candidate, unless the
    day holds a single punch or the span is below the minimum separation; then the
    OUT candidate is empty so a double press never turns into a near-zero workday.
    """

    def __init__(
        self,
        *,
        min_separation_minutes: int = DEFAULT_MIN_PUNCH_SEPARATION_MINUTES,
        logger: Optional[logging.Logger] = None,
    ):
        self._min_separation = timedelta(minutes=int(min_separation_minutes))
        self._log = logger or logging.getLogger(__name__)

    def select(self, employee_id: int, calendar_date: date, punches: Sequence[RawPunch]) -> PunchGroup:
        ordered, dropped = collapse_duplicates(punches)
        if dropped:
            self._log.warning(
                "Discarded %d duplicate punch(es) for employee %s on %s", dropped, employee_id, calendar_date
            )

        in_punch = ordered[0] if ordered else None
        out_punch = None
        if len(ordered) >= 2 and ordered[-1].timestamp - ordered[0].timestamp >= self._min_separation:
            out_punch = ordered[-1]

        return PunchGroup(
            employee_id=employee_id,
            calendar_date=calendar_date,
            punches=tuple(ordered),
            in_punch=in_punch,
            out_punch=out_punch,
            duplicates_collapsed=dropped,
        )

    def group(self, punches: Iterable[RawPunch]) -> list[PunchGroup]:
        """Group resolved punches; unresolved ones never take part in grouping."""

        buckets: dict[tuple[int, date], list[RawPunch]] = defaultdict(list)
        for punch in punches:
            if not punch.is_resolved:
                continue
            buckets[(punch.employee_id, punch.calendar_date)].append(punch)

        return [self.select(emp_id, day, buckets[(emp_id, day)]) for emp_id, day in sorted(buckets)]
