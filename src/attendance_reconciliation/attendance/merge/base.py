from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ...core.enums import MergeCase, Source
from ..model import MergeMetadata


@dataclass(frozen=True)
class MergeInputs:
    """The four candidate times of one employee-day, already in the organizational timezone."""

    employee_id: int
    calendar_date: date
    wf_in: Optional[datetime] = None
    wf_out: Optional[datetime] = None
    bio_in: Optional[datetime] = None
    bio_out: Optional[datetime] = None
    in_diff_minutes: Optional[int] = None
    out_diff_minutes: Optional[int] = None

    @property
    def has_all_four(self) -> bool:
        return None not in (self.wf_in, self.wf_out, self.bio_in, self.bio_out)

    @property
    def workflow_complete(self) -> bool:
        return self.wf_in is not None and self.wf_out is not None

    @property
    def biometric_complete(self) -> bool:
        return self.bio_in is not None and self.bio_out is not None

    def pick_in(self, source: Source) -> Optional[datetime]:
        return self.bio_in if source == Source.BIOMETRIC else self.wf_in

    def pick_out(self, source: Source) -> Optional[datetime]:
        return self.bio_out if source == Source.BIOMETRIC else self.wf_out


@dataclass(frozen=True)
class MergeDecision:
    final_in: Optional[datetime]
    final_out: Optional[datetime]
    in_source: Optional[Source]
    out_source: Optional[Source]
    remarks: str


@dataclass(frozen=True)
class MergeResult:
    employee_id: int
    calendar_date: date
    case: MergeCase
    final_in: Optional[datetime]
    final_out: Optional[datetime]
    in_source: Optional[Source]
    out_source: Optional[Source]
    remarks: str
    inputs: MergeInputs

    @property
    def in_diff_minutes(self) -> Optional[int]:
        return self.inputs.in_diff_minutes

    @property
    def out_diff_minutes(self) -> Optional[int]:
        return self.inputs.out_diff_minutes

    def metadata(self, *, punch_count: int = 0) -> MergeMetadata:
        return MergeMetadata(
            case=self.case,
            remarks=self.remarks,
            in_source=self.in_source,
            out_source=self.out_source,
            in_diff_minutes=self.inputs.in_diff_minutes,
            out_diff_minutes=self.inputs.out_diff_minutes,
            wf_in=self.inputs.wf_in,
            wf_out=self.inputs.wf_out,
            bio_in=self.inputs.bio_in,
            bio_out=self.inputs.bio_out,
            punch_count=punch_count,
        )


class MergeStrategy(ABC):
    """Strategy Pattern: one class per merge case."""

    case: MergeCase

    @abstractmethod
    def decide(self, inputs: MergeInputs) -> MergeDecision:
        raise NotImplementedError
