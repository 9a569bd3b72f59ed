from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import WorkflowRecord


class WorkflowRepository(Protocol):
    def list_for_range(self, *, start_date: date, end_date: date) -> Sequence[WorkflowRecord]:
        raise NotImplementedError
