from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any, Iterable, Mapping, Optional, Sequence, TextIO

from ..common.datetime_utils import parse_punch_datetime
from ..core.constants import ACCEPTED_DATETIME_FORMATS
from ..core.enums import PunchType
from ..core.exceptions import DateFormatError
from .model import RawPunch

IDENTIFIER_FIELDS = (
    "biometric_id", "biometricid", "card_no", "cardno",
    "badge_id", "badgeid", "emp_code", "employee_code",
)
NAME_FIELDS = ("name", "employee_name", "full_name", "fullname", "employee")
TIMESTAMP_FIELDS = (
    "punch_time", "punchtime", "time", "timestamp",
    "datetime", "date_time", "clock_time", "date",
)
DEVICE_FIELDS = ("device_id", "deviceid", "device", "terminal")
LOCATION_FIELDS = ("location", "site", "gate")
DIRECTION_FIELDS = ("punch_type", "direction", "in_out", "status")


def extract_field(row: Mapping[str, Any], field_names: Sequence[str]) -> Optional[str]:
    """First non-empty value whose column name matches one of ``field_names`` (case-insensitive)."""

    if not row:
        return None
    normalized = {str(k).lower().strip(): v for k, v in row.items() if k is not None}
    for name in field_names:
        value = normalized.get(name)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _punch_type(raw: Optional[str]) -> PunchType:
    value = (raw or "").strip().lower()
    if value in {"in", "check in", "checkin", "c/in", "0"}:
        return PunchType.IN
    if value in {"out", "check out", "checkout", "c/out", "1"}:
        return PunchType.OUT
    return PunchType.UNKNOWN


def read_csv_rows(stream: TextIO) -> list[dict]:
    return [dict(row) for row in csv.DictReader(stream)]


@dataclass(frozen=True)
class SkippedRow:
    row: Mapping[str, Any]
    error: str
    raw_value: Optional[str] = None


@dataclass
class IngestionResult:
    punches: list[RawPunch] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)
    duplicates: int = 0

    def summary(self) -> dict:
        return {"accepted": len(self.punches), "skipped": len(self.skipped), "duplicates": self.duplicates}


class PunchIngestor:
    """Turns pre-parsed spreadsheet rows into ``RawPunch`` values.

    Bad rows are skipped and reported with their raw value; the batch always continues.
    """

    def __init__(
        self,
        *,
        tz: tzinfo,
        formats: Sequence[str] = ACCEPTED_DATETIME_FORMATS,
        logger: Optional[logging.Logger] = None,
    ):
        self._tz = tz
        self._formats = tuple(formats)
        self._log = logger or logging.getLogger(__name__)

    def ingest_rows(self, rows: Iterable[Mapping[str, Any]], *, source_batch_id: str = "") -> IngestionResult:
        result = IngestionResult()
        seen: set[tuple[str, str]] = set()

        for row in rows:
            identifier = extract_field(row, IDENTIFIER_FIELDS)
            name = extract_field(row, NAME_FIELDS)
            raw_time = extract_field(row, TIMESTAMP_FIELDS)

            if not raw_time:
                result.skipped.append(SkippedRow(row=row, error="Missing punch time"))
                self._log.warning("Skipping row without punch time: %r", row)
                continue
            if not identifier and not name:
                result.skipped.append(SkippedRow(row=row, error="Missing both biometric ID and name", raw_value=raw_time))
                self._log.warning("Skipping row without identity: %r", row)
                continue

            key = (identifier or name or "", raw_time)
            if key in seen:
                result.duplicates += 1
                self._log.debug("Duplicate row in batch: %s at %s", key[0], raw_time)
                continue
            seen.add(key)

            try:
                timestamp = parse_punch_datetime(raw_time, self._tz, formats=self._formats)
            except DateFormatError as exc:
                result.skipped.append(SkippedRow(row=row, error=str(exc), raw_value=raw_time))
                self._log.warning("Skipping row with unparseable punch time %r", raw_time)
                continue

            result.punches.append(
                RawPunch.capture(
                    raw_identifier=identifier or "",
                    raw_name=name,
                    timestamp=timestamp,
                    tz=self._tz,
                    source_batch_id=source_batch_id,
                    raw_timestamp=raw_time,
                    device_id=extract_field(row, DEVICE_FIELDS),
                    location=extract_field(row, LOCATION_FIELDS),
                    punch_type=_punch_type(extract_field(row, DIRECTION_FIELDS)),
                )
            )

        self._log.info(
            "Ingested batch %s: %d accepted, %d skipped, %d duplicates",
            source_batch_id or "-", len(result.punches), len(result.skipped), result.duplicates,
        )
        return result
