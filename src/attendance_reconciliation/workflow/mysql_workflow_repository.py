from __future__ import annotations

from datetime import date, tzinfo
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, from_db_datetime
from .model import WorkflowRecord
from .repository import WorkflowRepository


class MySQLWorkflowRepository(WorkflowRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, tz: tzinfo):
        self._conn_factory = conn_factory
        self._tz = tz

    def list_for_range(self, *, start_date: date, end_date: date) -> Sequence[WorkflowRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, work_date, start_time, end_time
                FROM workflow_attendance
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date ASC, employee_id ASC
                """,
                (start_date, end_date),
            )
            return [
                WorkflowRecord(
                    employee_id=int(r["employee_id"]),
                    work_date=r["work_date"],
                    start_time=from_db_datetime(r.get("start_time"), self._tz),
                    end_time=from_db_datetime(r.get("end_time"), self._tz),
                )
                for r in fetchall(cur)
            ]
