from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ..core.enums import MatchType, ResolutionErrorCode
from ..employees.model import EmployeeIdentity


@dataclass(frozen=True)
class NameQuery:
    """Raw biometric identity, with the name split into first token / remaining tokens."""

    raw_identifier: str
    raw_name: str
    first: str
    last: str


@dataclass(frozen=True)
class Candidate:
    employee_id: int
    name: str
    biometric_code: Optional[str] = None
    similarity: Optional[float] = None

    @classmethod
    def of(cls, employee: EmployeeIdentity, similarity: Optional[float] = None) -> "Candidate":
        return cls(
            employee_id=employee.employee_id,
            name=employee.full_name,
            biometric_code=employee.biometric_code,
            similarity=similarity,
        )


@dataclass(frozen=True)
class ResolutionResult:
    success: bool
    employee_id: Optional[int] = None
    match_type: Optional[MatchType] = None
    confidence: float = 0.0
    error_code: Optional[ResolutionErrorCode] = None
    message: str = ""
    candidates: tuple[Candidate, ...] = ()
    remarks: Optional[str] = None

    @classmethod
    def matched(
        cls,
        employee: EmployeeIdentity,
        match_type: MatchType,
        confidence: float,
        *,
        remarks: Optional[str] = None,
    ) -> "ResolutionResult":
        return cls(
            success=True,
            employee_id=employee.employee_id,
            match_type=match_type,
            confidence=confidence,
            remarks=remarks,
        )

    @classmethod
    def failed(
        cls,
        error_code: ResolutionErrorCode,
        message: str,
        *,
        candidates: tuple[Candidate, ...] = (),
    ) -> "ResolutionResult":
        return cls(success=False, error_code=error_code, message=message, candidates=candidates)

    @property
    def is_ambiguous(self) -> bool:
        return self.error_code == ResolutionErrorCode.AMBIGUOUS_MATCH

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "employee_id": self.employee_id,
            "match_type": self.match_type.value if self.match_type else None,
            "confidence": self.confidence,
            "error_code": self.error_code.value if self.error_code else None,
            "message": self.message,
            "remarks": self.remarks,
            "candidates": [
                {
                    "employee_id": c.employee_id,
                    "name": c.name,
                    "biometric_code": c.biometric_code,
                    "similarity": c.similarity,
                }
                for c in self.candidates
            ],
        }


@dataclass
class BatchResolution:
    """Batch mapping outcome, bucketed the way the review screen consumes it."""

    successful: list[tuple[Any, ResolutionResult]] = field(default_factory=list)
    ambiguous: list[tuple[Any, ResolutionResult]] = field(default_factory=list)
    failed: list[tuple[Any, ResolutionResult]] = field(default_factory=list)
    by_type: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.successful) + len(self.ambiguous) + len(self.failed)

    def summary(self) -> dict:
        return {
            "total": self.total,
            "matched": len(self.successful),
            "failed": len(self.failed),
            "ambiguous": len(self.ambiguous),
            "by_type": dict(self.by_type),
        }
