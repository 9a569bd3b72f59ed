from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from ...common.datetime_utils import to_timezone, whole_minutes_between
from ...core.constants import DEFAULT_ORG_TIMEZONE, LARGE_IN_MISMATCH_MINUTES, LONG_SHIFT_HOURS
from ...core.enums import AnomalyType, Severity
from .base import MergeInputs, MergeResult
from .factory import MergeStrategyFactory


@dataclass(frozen=True)
class MergeAnomaly:
    type: AnomalyType
    severity: Severity
    message: str


class MergeEngine:
    """Merges workflow and biometric times into one IN/OUT pair.

    Pure: no I/O, and the same inputs always give the same result.
    """

    def __init__(
        self,
        *,
        factory: Optional[MergeStrategyFactory] = None,
        tz: Optional[tzinfo] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._factory = factory or MergeStrategyFactory()
        self._tz = tz or ZoneInfo(DEFAULT_ORG_TIMEZONE)
        self._log = logger or logging.getLogger(__name__)

    def build_inputs(
        self,
        employee_id: int,
        calendar_date: date,
        wf_in: Optional[datetime],
        wf_out: Optional[datetime],
        bio_in: Optional[datetime],
        bio_out: Optional[datetime],
    ) -> MergeInputs:
        wf_in, wf_out, bio_in, bio_out = (to_timezone(v, self._tz) for v in (wf_in, wf_out, bio_in, bio_out))
        return MergeInputs(
            employee_id=employee_id,
            calendar_date=calendar_date,
            wf_in=wf_in,
            wf_out=wf_out,
            bio_in=bio_in,
            bio_out=bio_out,
            in_diff_minutes=whole_minutes_between(wf_in, bio_in) if wf_in and bio_in else None,
            out_diff_minutes=whole_minutes_between(wf_out, bio_out) if wf_out and bio_out else None,
        )

    def merge(
        self,
        employee_id: int,
        calendar_date: date,
        wf_in: Optional[datetime] = None,
        wf_out: Optional[datetime] = None,
        bio_in: Optional[datetime] = None,
        bio_out: Optional[datetime] = None,
    ) -> MergeResult:
        inputs = self.build_inputs(employee_id, calendar_date, wf_in, wf_out, bio_in, bio_out)
        strategy = self._factory.for_inputs(inputs)
        decision = strategy.decide(inputs)

        self._log.debug(
            "Merged employee %s on %s: case=%s %s", employee_id, calendar_date, strategy.case.value, decision.remarks
        )
        return MergeResult(
            employee_id=employee_id,
            calendar_date=calendar_date,
            case=strategy.case,
            final_in=decision.final_in,
            final_out=decision.final_out,
            in_source=decision.in_source,
            out_source=decision.out_source,
            remarks=decision.remarks,
            inputs=inputs,
        )

    def detect_anomalies(self, result: MergeResult) -> list[MergeAnomaly]:
        anomalies: list[MergeAnomaly] = []

        if result.final_in and result.final_out:
            hours = (result.final_out - result.final_in).total_seconds() / 3600
            if hours > LONG_SHIFT_HOURS:
                anomalies.append(
                    MergeAnomaly(
                        AnomalyType.UNUSUALLY_LONG_SHIFT,
                        Severity.WARNING,
                        f"Worked {round(hours, 2)} hours (> {LONG_SHIFT_HOURS} hours)",
                    )
                )

        if result.in_diff_minutes is not None and result.in_diff_minutes > LARGE_IN_MISMATCH_MINUTES:
            anomalies.append(
                MergeAnomaly(
                    AnomalyType.LARGE_IN_TIME_MISMATCH,
                    Severity.WARNING,
                    f"IN time mismatch: {result.in_diff_minutes} minutes",
                )
            )

        if result.final_in and result.final_out and result.final_in.date() != result.final_out.date():
            anomalies.append(MergeAnomaly(AnomalyType.MIDNIGHT_CROSSOVER, Severity.INFO, "Shift crosses midnight"))

        return anomalies
