from __future__ import annotations

import io
import logging

from flask import Flask, jsonify, send_file

from ..common.auth import current_principal, roles_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role
from .rendering import render_png

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    hr_required = roles_required([Role.HR, Role.SUPERADMIN])
    service = container.qr_session_service

    @app.route("/qr/generate", methods=["POST"], endpoint="qr_generate")
    @hr_required
    def qr_generate():
        data = json_body()
        principal = current_principal()
        session = service.generate(
            data.get("type"),
            duration_minutes=data.get("duration_minutes"),
            duration_hours=data.get("duration_hours"),
            created_by=principal.user_id if principal else None,
        )
        return jsonify({"session": service.to_payload(session), "message": "QR code generated successfully"})

    @app.route("/qr/current", methods=["GET"], endpoint="qr_current")
    @hr_required
    def qr_current():
        session = service.current()
        if not session:
            return jsonify({"ok": False, "error": "not_found", "message": "No active QR session found"}), 404
        return jsonify({"session": service.to_payload(session)})

    @app.route("/qr/revoke", methods=["POST"], endpoint="qr_revoke")
    @hr_required
    def qr_revoke():
        principal = current_principal()
        count = service.revoke(revoked_by=principal.user_id if principal else None)
        return jsonify({"revokedCount": count, "message": "QR codes revoked successfully"})

    @app.route("/qr/<session_id>/image.png", methods=["GET"], endpoint="qr_image")
    @hr_required
    def qr_image(session_id: str):
        """Printable PNG of a stored session (static codes are often printed)."""
        session = container.qr_sessions_repo.get_by_id(session_id)
        if not session:
            return jsonify({"ok": False, "error": "session_not_found", "message": "QR session not found"}), 404

        buf = io.BytesIO(render_png(session.session_id))
        return send_file(buf, mimetype="image/png", download_name=f"{session.session_id}.png")
