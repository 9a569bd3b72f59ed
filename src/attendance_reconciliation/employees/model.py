from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EmployeeIdentity:
    """Directory entry used for biometric identity resolution.

    Read-only reference data: the directory itself is owned by an external system.
    """

    employee_id: int
    first_name: str
    last_name: str = ""
    biometric_code: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
