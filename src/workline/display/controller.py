"""QR display state machine.

idle -> displaying(session) -> expiring(session, seconds_left) -> rotated | cleared

The controller owns at most one countdown timer and one poll timer. Every
timer callback carries the generation it was armed for, so a callback that
survives a cancel (or fires after ``close()``) is ignored.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Protocol

from ..core.enums import SessionType
from .api_client import ApiError
from .preferences import DisplayPreferences, QrMode
from .timers import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

COUNTDOWN_TICK_SECONDS = 1.0


class DisplayState(str, Enum):
    IDLE = "idle"
    DISPLAYING = "displaying"
    EXPIRING = "expiring"
    ROTATED = "rotated"
    CLEARED = "cleared"


class QrApi(Protocol):
    def generate(self, body: dict) -> dict:
        ...

    def current(self) -> Optional[dict]:
        ...

    def revoke(self) -> int:
        ...


class QrView(Protocol):
    def show_session(self, session: dict) -> None:
        ...

    def update_countdown(self, seconds_left: int) -> None:
        ...

    def show_placeholder(self, message: str) -> None:
        ...

    def show_error(self, message: str) -> None:
        ...


def _parse_instant(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


class QrDisplayController:
    def __init__(
        self,
        api: QrApi,
        view: QrView,
        scheduler: Scheduler,
        preferences: DisplayPreferences = DisplayPreferences(),
        *,
        clock: Callable[[], datetime] = datetime.now,
        on_preferences_changed: Optional[Callable[[DisplayPreferences], None]] = None,
    ):
        self._api = api
        self._view = view
        self._scheduler = scheduler
        self._prefs = preferences
        self._clock = clock
        self._on_preferences_changed = on_preferences_changed

        self._state = DisplayState.IDLE
        self._session: Optional[dict] = None
        self._expires_at: Optional[datetime] = None

        self._countdown: Optional[TimerHandle] = None
        self._countdown_gen = 0
        self._poll: Optional[TimerHandle] = None
        self._poll_gen = 0
        self._subscribed = False
        self._auto_show = False
        self._closed = False

        self.latest_polled: Optional[dict] = None

    @property
    def state(self) -> DisplayState:
        return self._state

    @property
    def session(self) -> Optional[dict]:
        return self._session

    @property
    def preferences(self) -> DisplayPreferences:
        return self._prefs

    @property
    def subscribed(self) -> bool:
        return self._subscribed

    @property
    def has_pending_timers(self) -> bool:
        return self._countdown is not None or self._poll is not None

    # -- operator actions -------------------------------------------------

    def set_mode(self, mode: QrMode) -> None:
        self._prefs = self._prefs.with_mode(mode)
        if self._on_preferences_changed:
            self._on_preferences_changed(self._prefs)

        if self._prefs.mode is not QrMode.ROTATING:
            # A running countdown keeps going; at zero it clears instead of regenerating.
            self.unsubscribe()

    def generate(self) -> Optional[dict]:
        if self._closed:
            return None

        body = self._prefs.generate_request()
        if body is None:
            self._view.show_error("Enable either Rotation or Static mode before generating a QR.")
            return None

        try:
            session = self._api.generate(body)
        except ApiError as e:
            logger.warning("QR generate failed: %s", e)
            self._cancel_countdown()
            self._session = None
            self._state = DisplayState.CLEARED
            self._view.show_error(f"Failed to generate QR: {e}")
            return None

        self.display(session)
        if self._prefs.mode is QrMode.ROTATING:
            self.subscribe(auto_show=True)
        else:
            self.unsubscribe()
        return session

    def revoke(self) -> Optional[int]:
        try:
            count = self._api.revoke()
        except ApiError as e:
            logger.warning("QR revoke failed: %s", e)
            self._view.show_error("Failed to revoke QR codes.")
            return None

        self._cancel_countdown()
        self.unsubscribe()
        self._session = None
        self._expires_at = None
        self._state = DisplayState.IDLE
        self._view.show_placeholder("qr code")
        return count

    def close(self) -> None:
        """Tear down: cancel every timer. Nothing fires after this returns."""
        self._closed = True
        self._cancel_countdown()
        self.unsubscribe()
        self._state = DisplayState.IDLE

    # -- display ----------------------------------------------------------

    def display(self, session: Optional[dict]) -> None:
        self._cancel_countdown()

        if not session or not session.get("imageDataUrl"):
            self._session = None
            self._expires_at = None
            self._state = DisplayState.IDLE
            self._view.show_placeholder("qr code")
            return

        self._session = session
        self._state = DisplayState.DISPLAYING
        self._view.show_session(session)

        expires_at = session.get("expires_at")
        if session.get("type") == SessionType.ROTATING.value and expires_at:
            self._expires_at = _parse_instant(expires_at)
            self._start_countdown()
        else:
            self._expires_at = None

    def _seconds_left(self) -> int:
        remaining = (self._expires_at - self._clock()).total_seconds()
        return max(0, int(math.floor(remaining)))

    def _start_countdown(self) -> None:
        self._state = DisplayState.EXPIRING
        self._view.update_countdown(self._seconds_left())
        self._countdown_gen += 1
        self._arm_tick(self._countdown_gen)

    def _arm_tick(self, gen: int) -> None:
        self._countdown = self._scheduler.call_later(COUNTDOWN_TICK_SECONDS, lambda: self._tick(gen))

    def _cancel_countdown(self) -> None:
        self._countdown_gen += 1
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None

    def _tick(self, gen: int) -> None:
        if self._closed or gen != self._countdown_gen:
            return

        seconds_left = self._seconds_left()
        self._view.update_countdown(seconds_left)
        if seconds_left > 0:
            self._arm_tick(gen)
            return

        self._countdown = None
        self._on_expired()

    def _on_expired(self) -> None:
        if self._prefs.mode is QrMode.ROTATING:
            self._state = DisplayState.ROTATED
            self._view.show_placeholder("Refreshing QR...")
            self.generate()
            return

        self._session = None
        self._expires_at = None
        self._state = DisplayState.CLEARED
        self._view.show_placeholder("QR expired")

    # -- polling ----------------------------------------------------------

    def subscribe(self, *, auto_show: bool = False) -> None:
        """Start polling ``current()``: one silent fetch now, then every poll interval."""

        if self._closed:
            return
        self._cancel_poll()
        self._subscribed = True
        self._auto_show = auto_show
        self._poll_gen += 1
        self._poll_once(self._poll_gen)

    def unsubscribe(self) -> None:
        self._cancel_poll()
        self._subscribed = False
        self._auto_show = False

    def _cancel_poll(self) -> None:
        self._poll_gen += 1
        if self._poll is not None:
            self._poll.cancel()
            self._poll = None

    def _poll_once(self, gen: int) -> None:
        if self._closed or not self._subscribed or gen != self._poll_gen:
            return

        try:
            session = self._api.current()
        except ApiError as e:
            logger.debug("QR poll failed: %s", e)
            session = None

        # The fetch is synchronous, so an unsubscribe from a view callback is seen here.
        if gen != self._poll_gen:
            return

        self.latest_polled = session
        displayed_id = self._session.get("session_id") if self._session else None
        if session and self._auto_show and session.get("session_id") != displayed_id:
            self.display(session)

        self._poll = self._scheduler.call_later(self._prefs.poll_interval_seconds, lambda: self._poll_once(gen))
