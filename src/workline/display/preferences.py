from __future__ import annotations

import json
from dataclasses import asdict, dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional

from ..core.constants import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_ROTATING_MINUTES, DEFAULT_STATIC_HOURS
from ..core.enums import SessionType


class QrMode(str, Enum):
    """Which kind of code the screen shows. One value, so "both on" cannot happen."""

    ROTATING = "rotating"
    STATIC = "static"
    OFF = "off"

    @property
    def session_type(self) -> Optional[SessionType]:
        if self is QrMode.OFF:
            return None
        return SessionType(self.value)


@dataclass(frozen=True)
class DisplayPreferences:
    mode: QrMode = QrMode.OFF
    rotating_minutes: float = DEFAULT_ROTATING_MINUTES
    static_hours: float = DEFAULT_STATIC_HOURS
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS

    def with_mode(self, mode: QrMode) -> "DisplayPreferences":
        return replace(self, mode=QrMode(mode))

    def generate_request(self) -> Optional[dict]:
        """Body for POST /qr/generate, or ``None`` when no mode is enabled."""
        if self.mode is QrMode.ROTATING:
            return {"type": SessionType.ROTATING.value, "duration_minutes": self.rotating_minutes}
        if self.mode is QrMode.STATIC:
            return {"type": SessionType.STATIC.value, "duration_hours": self.static_hours}
        return None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["mode"] = self.mode.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "DisplayPreferences":
        mode = data.get("mode")
        if mode is None:
            # Older saved settings carried two booleans; rotation wins when both are set.
            if data.get("rotation"):
                mode = QrMode.ROTATING.value
            elif data.get("static"):
                mode = QrMode.STATIC.value
            else:
                mode = QrMode.OFF.value
        defaults = cls()
        return cls(
            mode=QrMode(mode),
            rotating_minutes=float(data.get("rotating_minutes", defaults.rotating_minutes)),
            static_hours=float(data.get("static_hours", defaults.static_hours)),
            poll_interval_seconds=float(data.get("poll_interval_seconds", defaults.poll_interval_seconds)),
        )


def load_preferences(path: Path) -> DisplayPreferences:
    path = Path(path)
    if not path.exists():
        return DisplayPreferences()
    return DisplayPreferences.from_dict(json.loads(path.read_text(encoding="utf-8")))


def save_preferences(path: Path, prefs: DisplayPreferences) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(prefs.to_dict(), indent=2), encoding="utf-8")
