from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceMethod, AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, time_in, time_out,
    break_start, break_end, break_minutes, method, status,
    latitude, longitude, device_info, note
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        time_in=r.get("time_in"),
        time_out=r.get("time_out"),
        break_start=r.get("break_start"),
        break_end=r.get("break_end"),
        break_minutes=int(r.get("break_minutes") or 0),
        method=AttendanceMethod(r["method"]),
        status=AttendanceStatus(r["status"]),
        latitude=r.get("latitude"),
        longitude=r.get("longitude"),
        device_info=r.get("device_info"),
        note=r.get("note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _lock_row(cur, employee_id: int, work_date: date) -> bool:
        # rowcount counts changed rows, not matched ones, so existence comes from this lock.
        cur.execute(
            "SELECT attendance_id FROM attendance_records WHERE employee_id=%s AND work_date=%s FOR UPDATE",
            (int(employee_id), work_date),
        )
        return fetchone(cur) is not None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        time_in: datetime,
        status: AttendanceStatus,
        method: AttendanceMethod,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        device_info: Optional[str] = None,
        note: Optional[str] = None,
    ) -> int:
        # uq_attendance_employee_date turns a concurrent second insert into DuplicateRecordError.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, work_date, time_in, status, method,
                    latitude, longitude, device_info, note
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    work_date,
                    time_in,
                    status.value,
                    method.value,
                    latitude,
                    longitude,
                    device_info,
                    note,
                ),
            )
            return int(cur.lastrowid)

    def close_checkout(self, *, employee_id: int, work_date: date, time_out: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET time_out=%s
                WHERE employee_id=%s AND work_date=%s AND time_out IS NULL
                """,
                (time_out, int(employee_id), work_date),
            )
            return cur.rowcount > 0

    def start_break(self, *, employee_id: int, work_date: date, started_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if not self._lock_row(cur, employee_id, work_date):
                return False
            cur.execute(
                """
                UPDATE attendance_records
                SET break_start=%s, break_end=NULL
                WHERE employee_id=%s AND work_date=%s
                """,
                (started_at, int(employee_id), work_date),
            )
            return True

    def end_break(
        self,
        *,
        employee_id: int,
        work_date: date,
        expected_start: datetime,
        ended_at: datetime,
        minutes: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET break_end=%s, break_minutes=COALESCE(break_minutes, 0) + %s
                WHERE employee_id=%s AND work_date=%s
                  AND break_start=%s AND break_end IS NULL
                """,
                (ended_at, int(minutes), int(employee_id), work_date, expected_start),
            )
            return cur.rowcount > 0

    def upsert_override(
        self,
        *,
        employee_id: int,
        work_date: date,
        time_in: Optional[datetime],
        time_out: Optional[datetime],
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            existed = self._lock_row(cur, employee_id, work_date)
            cur.execute(
                """
                INSERT INTO attendance_records(employee_id, work_date, time_in, time_out, status, method, note)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    time_in=COALESCE(VALUES(time_in), time_in),
                    time_out=COALESCE(VALUES(time_out), time_out),
                    status=VALUES(status),
                    method=VALUES(method),
                    note=VALUES(note)
                """,
                (
                    int(employee_id),
                    work_date,
                    time_in,
                    time_out,
                    status.value,
                    AttendanceMethod.OVERRIDE.value,
                    note,
                ),
            )
            return existed

    def list_range(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date DESC, time_in DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
