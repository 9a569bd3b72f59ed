from __future__ import annotations

from typing import Protocol, Sequence

from .model import EmployeeIdentity


class EmployeeDirectory(Protocol):
    """Read-only view of the employee directory snapshot."""

    def list_identities(self) -> Sequence[EmployeeIdentity]:
        raise NotImplementedError

    def list_active_employee_ids(self) -> Sequence[int]:
        raise NotImplementedError
