from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import SessionRejection, SessionType


@dataclass(frozen=True)
class QrSession:
    """Domain entity: a time-bounded QR session.

    ``session_id`` is the only thing encoded into the QR image; the image is
    rendered on demand and never stored.
    """

    session_id: str
    session_type: SessionType
    created_at: datetime
    expires_at: datetime
    is_active: bool = True
    created_by: Optional[int] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def is_usable(self, now: datetime) -> bool:
        return self.is_active and not self.is_expired(now)

    def to_dict(self, *, image_data_url: Optional[str] = None) -> dict:
        data = {
            "session_id": self.session_id,
            "type": self.session_type.value,
            "issued_at": isoformat_or_none(self.created_at),
            "expires_at": isoformat_or_none(self.expires_at),
            "is_active": self.is_active,
        }
        if image_data_url is not None:
            data["imageDataUrl"] = image_data_url
        return data


@dataclass(frozen=True)
class SessionCheck:
    """Outcome of validating a session for a check-in."""

    session: Optional[QrSession]
    rejection: Optional[SessionRejection] = None

    @property
    def ok(self) -> bool:
        return self.rejection is None
