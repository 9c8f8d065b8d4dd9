from __future__ import annotations

from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, username, email, full_name, schedule_start_time, is_active"


def _to_employee(row: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        username=row["username"],
        full_name=row["full_name"],
        email=row.get("email"),
        schedule_start_time=normalize_mysql_time(row.get("schedule_start_time")),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value: object) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE {where}=%s", (value,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._get_one("employee_id", int(employee_id))

    def get_by_username(self, username: str) -> Optional[Employee]:
        return self._get_one("username", username)

    def get_by_email(self, email: str) -> Optional[Employee]:
        return self._get_one("LOWER(email)", email.lower())
