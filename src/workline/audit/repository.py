from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from ..core.enums import AuditAction


class AuditLog(Protocol):
    """Append-only audit trail. Formatting and browsing live outside the core."""

    def record(self, *, actor_id: Optional[int], action: AuditAction, details: Mapping[str, Any]) -> None:
        raise NotImplementedError
