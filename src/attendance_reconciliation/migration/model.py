from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

from ..core.enums import MigrationStep


class StepStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepResult:
    step: MigrationStep
    status: StepStatus = StepStatus.COMPLETED
    count: int = 0
    errors: list[dict] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step.value,
            "status": self.status.value,
            "count": self.count,
            "errors": list(self.errors),
            "details": dict(self.details),
        }


@dataclass
class MigrationSummary:
    start_date: date
    end_date: date
    steps: list[StepResult] = field(default_factory=list)
    backup_path: Optional[str] = None
    issues_before: Optional[int] = None
    issues_after: Optional[int] = None
    cancelled: bool = False

    def result_for(self, step: MigrationStep) -> Optional[StepResult]:
        return next((s for s in self.steps if s.step == step), None)

    def _count(self, step: MigrationStep) -> int:
        result = self.result_for(step)
        return result.count if result and result.status == StepStatus.COMPLETED else 0

    @property
    def backed_up(self) -> int:
        return self._count(MigrationStep.BACKUP)

    @property
    def cleaned(self) -> int:
        return self._count(MigrationStep.CLEAN)

    @property
    def fixed(self) -> int:
        return self._count(MigrationStep.FIX_IDENTITIES)

    @property
    def deduplicated(self) -> int:
        return self._count(MigrationStep.DEDUP)

    @property
    def reconciled(self) -> int:
        return self._count(MigrationStep.RECONCILE)

    @property
    def improved(self) -> Optional[bool]:
        if self.issues_before is None or self.issues_after is None:
            return None
        return self.issues_after < self.issues_before

    @property
    def errors(self) -> list[dict]:
        return [{"step": s.step.value, **e} for s in self.steps for e in s.errors]

    @property
    def success(self) -> bool:
        return not self.cancelled and all(s.status == StepStatus.COMPLETED for s in self.steps)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start_date.isoformat(),
            "end": self.end_date.isoformat(),
            "success": self.success,
            "cancelled": self.cancelled,
            "backup_path": self.backup_path,
            "backed_up": self.backed_up,
            "cleaned": self.cleaned,
            "fixed": self.fixed,
            "deduplicated": self.deduplicated,
            "reconciled": self.reconciled,
            "issues_before": self.issues_before,
            "issues_after": self.issues_after,
            "improved": self.improved,
            "steps": [s.to_dict() for s in self.steps],
            "errors": self.errors,
        }
