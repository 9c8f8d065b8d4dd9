from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import QrSession


class QrSessionRepository(Protocol):
    """Persistence for QR sessions. Rows are deactivated, never deleted."""

    def replace_active(self, session: QrSession) -> int:
        """Deactivate every active session and insert ``session`` as one transaction.

        Returns how many sessions were deactivated.
        """

        raise NotImplementedError

    def get_by_id(self, session_id: str) -> Optional[QrSession]:
        raise NotImplementedError

    def list_active(self, *, now: datetime) -> Sequence[QrSession]:
        """Active sessions not expired at ``now``, newest first."""

        raise NotImplementedError

    def deactivate_all(self) -> int:
        raise NotImplementedError

    def deactivate_expired(self, *, now: datetime) -> int:
        raise NotImplementedError
