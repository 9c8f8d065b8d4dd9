from __future__ import annotations

import sys
from typing import TextIO

from ..qr_sessions.rendering import render_ascii


class ConsoleView:
    """Terminal renderer for kiosks without a browser."""

    def __init__(self, out: TextIO = sys.stdout):
        self._out = out

    def show_session(self, session: dict) -> None:
        self._out.write("\n")
        render_ascii(session["session_id"], out=self._out)
        self._out.write(f"session {session['session_id']} ({session.get('type')})\n")
        if session.get("expires_at"):
            self._out.write(f"expires at {session['expires_at']}\n")
        self._out.flush()

    def update_countdown(self, seconds_left: int) -> None:
        self._out.write(f"\rexpires in {seconds_left:>3}s ")
        self._out.flush()

    def show_placeholder(self, message: str) -> None:
        self._out.write(f"\n[{message}]\n")
        self._out.flush()

    def show_error(self, message: str) -> None:
        self._out.write(f"\n!! {message}\n")
        self._out.flush()
