from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import EmployeeIdentity
from .repository import EmployeeDirectory


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_identities(self) -> Sequence[EmployeeIdentity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, first_name, last_name, biometric_code, is_active
                FROM employees
                ORDER BY employee_id ASC
                """
            )
            return [
                EmployeeIdentity(
                    employee_id=int(r["employee_id"]),
                    first_name=r["first_name"] or "",
                    last_name=r.get("last_name") or "",
                    biometric_code=r.get("biometric_code"),
                    is_active=bool(r.get("is_active", True)),
                )
                for r in fetchall(cur)
            ]

    def list_active_employee_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_id FROM employees WHERE is_active=1 ORDER BY employee_id ASC")
            return [int(r["employee_id"]) for r in fetchall(cur)]
