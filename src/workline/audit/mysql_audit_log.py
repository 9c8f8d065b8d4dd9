from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from ..core.enums import AuditAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .repository import AuditLog


class MySQLAuditLog(AuditLog):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record(self, *, actor_id: Optional[int], action: AuditAction, details: Mapping[str, Any]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO audit_logs(actor_id, action, details) VALUES(%s,%s,%s)",
                (actor_id, action.value, json.dumps(dict(details), default=str)),
            )
