from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import SessionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import QrSession
from .repository import QrSessionRepository

_COLUMNS = "session_id, session_type, created_at, expires_at, is_active, created_by"


def _to_session(r: Dict[str, Any]) -> QrSession:
    return QrSession(
        session_id=r["session_id"],
        session_type=SessionType(r["session_type"]),
        created_at=r["created_at"],
        expires_at=r["expires_at"],
        is_active=bool(r["is_active"]),
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
    )


class MySQLQrSessionRepository(QrSessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def replace_active(self, session: QrSession) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # Serialize concurrent generates on the currently active row.
            cur.execute("SELECT qr_id FROM qr_sessions WHERE is_active=1 FOR UPDATE")
            fetchall(cur)
            cur.execute("UPDATE qr_sessions SET is_active=0 WHERE is_active=1")
            deactivated = int(cur.rowcount)
            cur.execute(
                """
                INSERT INTO qr_sessions(session_id, session_type, created_at, expires_at, is_active, created_by)
                VALUES(%s,%s,%s,%s,1,%s)
                """,
                (
                    session.session_id,
                    session.session_type.value,
                    session.created_at,
                    session.expires_at,
                    session.created_by,
                ),
            )
            return deactivated

    def get_by_id(self, session_id: str) -> Optional[QrSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM qr_sessions WHERE session_id=%s", (session_id,))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def list_active(self, *, now: datetime) -> Sequence[QrSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM qr_sessions
                WHERE is_active=1 AND expires_at > %s
                ORDER BY created_at DESC
                """,
                (now,),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def deactivate_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE qr_sessions SET is_active=0 WHERE is_active=1")
            return int(cur.rowcount)

    def deactivate_expired(self, *, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE qr_sessions SET is_active=0 WHERE is_active=1 AND expires_at <= %s", (now,))
            return int(cur.rowcount)
