from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Optional, Sequence

from ..core.enums import PunchType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, from_db_datetime, to_db_datetime
from .model import RawPunch
from .repository import PunchRepository

_COLUMNS = """
    punch_id, raw_identifier, raw_name, raw_timestamp, punch_time, calendar_date,
    source_batch_id, device_id, location, punch_type, employee_id, match_type,
    is_processed, consumed_by_attendance_id, created_at
"""


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, tz: tzinfo):
        self._conn_factory = conn_factory
        self._tz = tz

    def _to_model(self, r: dict) -> RawPunch:
        return RawPunch(
            punch_id=int(r["punch_id"]),
            raw_identifier=r.get("raw_identifier") or "",
            raw_name=r.get("raw_name"),
            raw_timestamp=r.get("raw_timestamp"),
            timestamp=from_db_datetime(r["punch_time"], self._tz),
            calendar_date=r["calendar_date"],
            source_batch_id=r.get("source_batch_id") or "",
            device_id=r.get("device_id"),
            location=r.get("location"),
            punch_type=PunchType(r.get("punch_type") or PunchType.UNKNOWN.value),
            employee_id=int(r["employee_id"]) if r.get("employee_id") is not None else None,
            match_type=r.get("match_type"),
            is_processed=bool(r.get("is_processed")),
            consumed_by_attendance_id=(
                int(r["consumed_by_attendance_id"]) if r.get("consumed_by_attendance_id") is not None else None
            ),
            created_at=r.get("created_at"),
        )

    def add(self, punch: RawPunch) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO biometric_punches(
                    raw_identifier, raw_name, raw_timestamp, punch_time, calendar_date,
                    source_batch_id, device_id, location, punch_type, employee_id, match_type
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    punch.raw_identifier,
                    punch.raw_name,
                    punch.raw_timestamp,
                    to_db_datetime(punch.timestamp, self._tz),
                    punch.calendar_date,
                    punch.source_batch_id,
                    punch.device_id,
                    punch.location,
                    punch.punch_type.value,
                    punch.employee_id,
                    punch.match_type,
                ),
            )
            return int(cur.lastrowid)

    def list_for_range(self, *, start_date: date, end_date: date) -> Sequence[RawPunch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM biometric_punches
                WHERE calendar_date BETWEEN %s AND %s
                ORDER BY calendar_date ASC, employee_id ASC, punch_time ASC, punch_id ASC
                """,
                (start_date, end_date),
            )
            return [self._to_model(r) for r in fetchall(cur)]

    def list_unresolved(self, *, start_date: date, end_date: date) -> Sequence[RawPunch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM biometric_punches
                WHERE employee_id IS NULL AND calendar_date BETWEEN %s AND %s
                ORDER BY punch_id ASC
                """,
                (start_date, end_date),
            )
            return [self._to_model(r) for r in fetchall(cur)]

    def exists(self, *, employee_id: int, calendar_date: date, timestamp: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS found FROM biometric_punches
                WHERE employee_id=%s AND calendar_date=%s AND punch_time=%s
                LIMIT 1
                """,
                (employee_id, calendar_date, to_db_datetime(timestamp, self._tz)),
            )
            return cur.fetchone() is not None

    def assign_employee(self, *, punch_id: int, employee_id: int, match_type: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE biometric_punches
                SET employee_id=%s, match_type=%s, is_processed=0
                WHERE punch_id=%s
                """,
                (employee_id, match_type, punch_id),
            )
            return cur.rowcount > 0

    def mark_consumed(self, *, punch_ids: Sequence[int], attendance_id: int) -> int:
        if not punch_ids:
            return 0
        placeholders = ",".join(["%s"] * len(punch_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE biometric_punches
                SET is_processed=1, consumed_by_attendance_id=%s
                WHERE punch_id IN ({placeholders})
                """,
                (attendance_id, *[int(p) for p in punch_ids]),
            )
            return cur.rowcount

    def delete_many(self, punch_ids: Sequence[int]) -> int:
        if not punch_ids:
            return 0
        placeholders = ",".join(["%s"] * len(punch_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM biometric_punches WHERE punch_id IN ({placeholders})",
                tuple(int(p) for p in punch_ids),
            )
            return cur.rowcount
