from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from types import ModuleType
from zoneinfo import ZoneInfo

from . import constants
from .enums import Source
from .exceptions import ValidationError


@dataclass(frozen=True)
class ReconciliationSettings:
    """Tunable thresholds handed to the engine components at construction time."""

    timezone_name: str = constants.DEFAULT_ORG_TIMEZONE
    tolerance_minutes: int = constants.DEFAULT_TOLERANCE_MINUTES
    min_punch_separation_minutes: int = constants.DEFAULT_MIN_PUNCH_SEPARATION_MINUTES
    standard_shift_hours: float = constants.DEFAULT_STANDARD_SHIFT_HOURS
    min_required_hours: float = constants.DEFAULT_MIN_REQUIRED_HOURS
    fuzzy_threshold: float = constants.DEFAULT_FUZZY_THRESHOLD
    fuzzy_clear_winner_margin: float = constants.DEFAULT_FUZZY_CLEAR_WINNER_MARGIN
    # Which source wins each side when both sources disagree beyond tolerance.
    mismatch_in_source: Source = Source.BIOMETRIC
    mismatch_out_source: Source = Source.WORKFLOW
    workers: int = constants.DEFAULT_RECONCILE_WORKERS
    mark_absent_skip_weekends: bool = False

    def __post_init__(self):
        if self.tolerance_minutes < 0:
            raise ValidationError("tolerance_minutes must be >= 0")
        if self.min_punch_separation_minutes < 0:
            raise ValidationError("min_punch_separation_minutes must be >= 0")
        if not 0 < self.min_required_hours <= self.standard_shift_hours:
            raise ValidationError("min_required_hours must be within (0, standard_shift_hours]")
        if not 0 <= self.fuzzy_threshold <= 1:
            raise ValidationError("fuzzy_threshold must be within [0, 1]")
        if self.workers < 1:
            raise ValidationError("workers must be >= 1")

    @property
    def timezone(self) -> tzinfo:
        return ZoneInfo(self.timezone_name)

    @classmethod
    def from_module(cls, settings: ModuleType) -> "ReconciliationSettings":
        """Build from a settings module (see ``config``); missing names keep their defaults."""

        defaults = cls()
        return cls(
            timezone_name=str(getattr(settings, "ORG_TIMEZONE", defaults.timezone_name)),
            tolerance_minutes=int(getattr(settings, "TOLERANCE_MINUTES", defaults.tolerance_minutes)),
            min_punch_separation_minutes=int(
                getattr(settings, "MIN_PUNCH_SEPARATION_MINUTES", defaults.min_punch_separation_minutes)
            ),
            standard_shift_hours=float(getattr(settings, "STANDARD_SHIFT_HOURS", defaults.standard_shift_hours)),
            min_required_hours=float(getattr(settings, "MIN_REQUIRED_HOURS", defaults.min_required_hours)),
            fuzzy_threshold=float(getattr(settings, "FUZZY_THRESHOLD", defaults.fuzzy_threshold)),
            fuzzy_clear_winner_margin=float(
                getattr(settings, "FUZZY_CLEAR_WINNER_MARGIN", defaults.fuzzy_clear_winner_margin)
            ),
            mismatch_in_source=Source(getattr(settings, "MISMATCH_IN_SOURCE", defaults.mismatch_in_source.value)),
            mismatch_out_source=Source(getattr(settings, "MISMATCH_OUT_SOURCE", defaults.mismatch_out_source.value)),
            workers=int(getattr(settings, "RECONCILE_WORKERS", defaults.workers)),
            mark_absent_skip_weekends=bool(
                getattr(settings, "MARK_ABSENT_SKIP_WEEKENDS", defaults.mark_absent_skip_weekends)
            ),
        )
