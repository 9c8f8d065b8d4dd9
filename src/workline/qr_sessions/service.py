from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import optional_positive_number
from ..core.constants import DEFAULT_ROTATING_MINUTES, DEFAULT_STATIC_HOURS
from ..core.enums import AuditAction, SessionRejection, SessionType
from ..core.exceptions import ConflictError, DuplicateRecordError, ValidationError
from ..audit.repository import AuditLog
from .model import QrSession, SessionCheck
from .rendering import render_data_url
from .repository import QrSessionRepository

logger = logging.getLogger(__name__)


def new_session_id(now: datetime) -> str:
    return f"qr_{int(now.timestamp() * 1000)}_{secrets.token_hex(6)}"


def parse_session_type(value) -> SessionType:
    if isinstance(value, SessionType):
        return value
    try:
        return SessionType(str(value or SessionType.ROTATING.value).strip().lower())
    except ValueError:
        raise ValidationError("type must be 'rotating' or 'static'") from None


class QrSessionService:
    """Use case: issue, look up, revoke and validate QR sessions.

    Only one session is active at a time; a new generate replaces whatever
    was active regardless of its type.
    """

    def __init__(
        self,
        sessions: QrSessionRepository,
        *,
        audit: Optional[AuditLog] = None,
        rotating_default_minutes: float = DEFAULT_ROTATING_MINUTES,
        static_default_hours: float = DEFAULT_STATIC_HOURS,
        renderer: Callable[[str], str] = render_data_url,
    ):
        self._sessions = sessions
        self._audit = audit
        self._rotating_default_minutes = float(rotating_default_minutes)
        self._static_default_hours = float(static_default_hours)
        self._renderer = renderer

    def lifetime_for(
        self,
        session_type: SessionType,
        *,
        duration_minutes=None,
        duration_hours=None,
    ) -> timedelta:
        if session_type == SessionType.ROTATING:
            minutes = optional_positive_number(duration_minutes, "duration_minutes")
            return timedelta(minutes=minutes or self._rotating_default_minutes)

        hours = optional_positive_number(duration_hours, "duration_hours")
        return timedelta(hours=hours or self._static_default_hours)

    def generate(
        self,
        session_type,
        *,
        duration_minutes=None,
        duration_hours=None,
        created_by: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> QrSession:
        session_type = parse_session_type(session_type)
        lifetime = self.lifetime_for(session_type, duration_minutes=duration_minutes, duration_hours=duration_hours)
        now = now or now_local()

        session = QrSession(
            session_id=new_session_id(now),
            session_type=session_type,
            created_at=now,
            expires_at=now + lifetime,
            is_active=True,
            created_by=created_by,
        )

        try:
            deactivated = self._sessions.replace_active(session)
        except DuplicateRecordError:
            # Another generate won the active slot between our deactivate and insert.
            logger.warning("concurrent QR generate detected, retrying once")
            try:
                deactivated = self._sessions.replace_active(session)
            except DuplicateRecordError:
                raise ConflictError("Another QR code is being generated, try again", reason="generate_conflict") from None

        logger.info(
            "QR session %s generated (type=%s, expires_at=%s, replaced=%d)",
            session.session_id,
            session_type.value,
            session.expires_at.isoformat(),
            deactivated,
        )
        if self._audit:
            self._audit.record(
                actor_id=created_by,
                action=AuditAction.QR_GENERATED,
                details={
                    "sessionId": session.session_id,
                    "type": session_type.value,
                    "expiresAt": session.expires_at.isoformat(),
                },
            )
        return session

    def cleanup_expired(self, *, now: Optional[datetime] = None) -> int:
        count = self._sessions.deactivate_expired(now=now or now_local())
        if count:
            logger.info("deactivated %d expired QR session(s)", count)
        return count

    def current(self, *, now: Optional[datetime] = None) -> Optional[QrSession]:
        """Active, unexpired session or ``None``. ``None`` is a normal outcome."""

        now = now or now_local()
        self.cleanup_expired(now=now)
        active = self._sessions.list_active(now=now)
        return active[0] if active else None

    def revoke(self, *, revoked_by: Optional[int] = None) -> int:
        count = self._sessions.deactivate_all()
        logger.info("revoked %d QR session(s)", count)
        if self._audit:
            self._audit.record(
                actor_id=revoked_by,
                action=AuditAction.QR_REVOKED,
                details={"revokedCount": count},
            )
        return count

    def validate_for_use(self, session_id: Optional[str], *, now: Optional[datetime] = None) -> SessionCheck:
        """Check order is not_found, inactive, expired; the first failure wins."""

        now = now or now_local()
        session = self._sessions.get_by_id(session_id) if session_id else None
        if session is None:
            return SessionCheck(session=None, rejection=SessionRejection.NOT_FOUND)
        if not session.is_active:
            return SessionCheck(session=session, rejection=SessionRejection.INACTIVE)
        if session.is_expired(now):
            return SessionCheck(session=session, rejection=SessionRejection.EXPIRED)
        return SessionCheck(session=session)

    def render(self, session: QrSession) -> str:
        return self._renderer(session.session_id)

    def to_payload(self, session: QrSession) -> dict:
        return session.to_dict(image_data_url=self.render(session))
