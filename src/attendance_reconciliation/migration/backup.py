from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from ..attendance.model import DailyAttendanceRecord
from ..common.datetime_utils import now_local
from ..core.exceptions import PersistenceError
from ..punches.model import RawPunch


class JsonBackupStore:
    """Writes a JSON snapshot of the records and punches of a date range.

    Snapshots are only ever written; source data is never deleted here.
    """

    def __init__(self, backup_dir: str, *, logger: Optional[logging.Logger] = None):
        self._dir = Path(backup_dir)
        self._log = logger or logging.getLogger(__name__)

    def save(
        self,
        *,
        start_date: date,
        end_date: date,
        records: Sequence[DailyAttendanceRecord],
        punches: Sequence[RawPunch],
    ) -> Path:
        ts = now_local().strftime("%Y%m%d_%H%M%S_%f")
        out_file = self._dir / f"attendance_backup_{start_date:%Y%m%d}_{end_date:%Y%m%d}_{ts}.json"
        payload = {
            "start": start_date.isoformat(),
            "end": end_date.isoformat(),
            "attendance_records": [r.to_dict() for r in records],
            "biometric_punches": [p.to_dict() for p in punches],
        }
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            out_file.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Cannot write backup {out_file}: {exc}") from exc

        self._log.info("Backup created: %s (%d records, %d punches)", out_file, len(records), len(punches))
        return out_file

    @staticmethod
    def load(path: str | Path) -> dict:
        return json.loads(Path(path).read_text(encoding="utf-8"))
