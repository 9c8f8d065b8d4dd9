from __future__ import annotations

from datetime import date, time
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import Schedule
from .repository import ScheduleRepository


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT schedule_id, employee_id, work_date, start_time, note
                FROM schedules
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Schedule(
                schedule_id=int(r["schedule_id"]),
                employee_id=int(r["employee_id"]),
                work_date=r["work_date"],
                start_time=normalize_mysql_time(r["start_time"]),
                note=r.get("note"),
            )

    def upsert(self, *, employee_id: int, work_date: date, start_time: time, note: Optional[str] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedules(employee_id, work_date, start_time, note)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE start_time=VALUES(start_time), note=VALUES(note)
                """,
                (int(employee_id), work_date, start_time, note),
            )

            # If it was an update, lastrowid can be 0; fetch schedule_id.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT schedule_id FROM schedules WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return int(r["schedule_id"]) if r else 0
