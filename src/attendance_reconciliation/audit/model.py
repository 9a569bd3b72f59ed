from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import IssueType, Priority, Severity


@dataclass(frozen=True)
class AuditIssue:
    """One data-quality finding. Derived on every audit run, never stored as state."""

    type: IssueType
    severity: Severity
    message: str
    suggestion: str = ""
    employee_id: Optional[int] = None
    calendar_date: Optional[date] = None
    record_ids: tuple[int, ...] = ()
    expected: Optional[str] = None
    actual: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "suggestion": self.suggestion,
            "employee_id": self.employee_id,
            "date": self.calendar_date.isoformat() if self.calendar_date else None,
            "record_ids": list(self.record_ids),
        }
        if self.expected is not None or self.actual is not None:
            data["expected"] = self.expected
            data["actual"] = self.actual
        return data


@dataclass
class AuditReport:
    start_date: date
    end_date: date
    generated_at: datetime
    summary: dict[str, int] = field(default_factory=dict)
    issues: dict[str, list[AuditIssue]] = field(default_factory=dict)
    report_path: Optional[str] = None

    @property
    def total_issues(self) -> int:
        return sum(len(v) for v in self.issues.values())

    def count(self, category: str) -> int:
        return len(self.issues.get(category, []))

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start_date.isoformat(),
            "end": self.end_date.isoformat(),
            "generated_at": self.generated_at.isoformat(),
            "summary": dict(self.summary),
            "issues": {category: [i.to_dict() for i in items] for category, items in self.issues.items()},
            "total_issues": self.total_issues,
            "report_path": self.report_path,
        }


@dataclass(frozen=True)
class Recommendation:
    category: str
    priority: Priority
    issue_count: int
    fixes: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "priority": self.priority.value,
            "issue_count": self.issue_count,
            "fixes": list(self.fixes),
        }
