from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..model import HoursBreakdown


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked hours and status)."""

    @abstractmethod
    def calculate(self, final_in: Optional[datetime], final_out: Optional[datetime]) -> HoursBreakdown:
        raise NotImplementedError
