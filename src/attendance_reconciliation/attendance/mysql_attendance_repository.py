from __future__ import annotations

from datetime import date, tzinfo
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, VerificationMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    dumps_json,
    fetchall,
    fetchone,
    from_db_datetime,
    loads_json,
    to_db_datetime,
)
from .model import AttendanceKey, DailyAttendanceRecord, MergeMetadata
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, calendar_date, final_in, final_out, worked_hours_decimal,
    regular_hours, overtime_hours, status, is_present, verification_method, merge_metadata
"""


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, tz: tzinfo):
        self._conn_factory = conn_factory
        self._tz = tz

    def _to_model(self, r: dict) -> DailyAttendanceRecord:
        return DailyAttendanceRecord(
            attendance_id=int(r["attendance_id"]),
            employee_id=int(r["employee_id"]) if r.get("employee_id") is not None else None,
            calendar_date=r["calendar_date"],
            final_in=from_db_datetime(r.get("final_in"), self._tz),
            final_out=from_db_datetime(r.get("final_out"), self._tz),
            worked_hours_decimal=float(r.get("worked_hours_decimal") or 0),
            regular_hours=float(r.get("regular_hours") or 0),
            overtime_hours=float(r.get("overtime_hours") or 0),
            status=AttendanceStatus(r["status"]),
            is_present=bool(r.get("is_present")),
            verification_method=VerificationMethod(r.get("verification_method") or VerificationMethod.AUTO.value),
            merge_metadata=MergeMetadata.from_dict(loads_json(r.get("merge_metadata"))),
        )

    def upsert(self, key: AttendanceKey, record: DailyAttendanceRecord) -> int:
        metadata = dumps_json(record.merge_metadata.to_dict()) if record.merge_metadata else None
        with db_cursor(self._conn_factory) as (_, cur):
            # LAST_INSERT_ID(expr) makes lastrowid report the existing id on update.
            cur.execute(
                """
                INSERT INTO daily_attendance(
                    employee_id, calendar_date, final_in, final_out, worked_hours_decimal,
                    regular_hours, overtime_hours, status, is_present, verification_method, merge_metadata
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    attendance_id=LAST_INSERT_ID(attendance_id),
                    final_in=VALUES(final_in),
                    final_out=VALUES(final_out),
                    worked_hours_decimal=VALUES(worked_hours_decimal),
                    regular_hours=VALUES(regular_hours),
                    overtime_hours=VALUES(overtime_hours),
                    status=VALUES(status),
                    is_present=VALUES(is_present),
                    verification_method=VALUES(verification_method),
                    merge_metadata=VALUES(merge_metadata)
                """,
                (
                    key.employee_id,
                    key.calendar_date,
                    to_db_datetime(record.final_in, self._tz),
                    to_db_datetime(record.final_out, self._tz),
                    record.worked_hours_decimal,
                    record.regular_hours,
                    record.overtime_hours,
                    record.status.value,
                    1 if record.is_present else 0,
                    record.verification_method.value,
                    metadata,
                ),
            )
            return int(cur.lastrowid)

    def get(self, key: AttendanceKey) -> Optional[DailyAttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM daily_attendance
                WHERE employee_id=%s AND calendar_date=%s
                """,
                (key.employee_id, key.calendar_date),
            )
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def list_for_range(self, *, start_date: date, end_date: date) -> Sequence[DailyAttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM daily_attendance
                WHERE calendar_date BETWEEN %s AND %s
                ORDER BY calendar_date ASC, employee_id ASC
                """,
                (start_date, end_date),
            )
            return [self._to_model(r) for r in fetchall(cur)]

    def delete_without_employee(self, *, start_date: date, end_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM daily_attendance WHERE employee_id IS NULL AND calendar_date BETWEEN %s AND %s",
                (start_date, end_date),
            )
            return cur.rowcount

    def move_date(self, *, attendance_id: int, new_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE daily_attendance SET calendar_date=%s WHERE attendance_id=%s",
                (new_date, attendance_id),
            )
            return cur.rowcount > 0
