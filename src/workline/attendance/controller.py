from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta
from typing import Optional

from flask import Flask, jsonify, request

from ..common.auth import current_principal, roles_required, token_required
from ..common.datetime_utils import parse_iso_date, parse_time_of_day
from ..common.http import REASON_MESSAGES, json_body
from ..common.validators import optional_float, require_non_empty
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_DAYS
from ..core.enums import CheckinRejection, Role
from ..core.exceptions import ValidationError
from .model import CheckinContext, CheckinResult

logger = logging.getLogger(__name__)

_REJECTION_STATUS = {
    CheckinRejection.EMPLOYEE_NOT_FOUND: 404,
    CheckinRejection.SESSION_NOT_FOUND: 404,
    CheckinRejection.SESSION_INACTIVE: 410,
    CheckinRejection.SESSION_EXPIRED: 410,
    CheckinRejection.ALREADY_CHECKED_IN: 409,
}

_DEVICE_INFO_MAX = 512


def _checkin_response(result: CheckinResult, *, created_status: int = 200):
    if result.ok:
        return jsonify({"ok": True, "record": result.record.to_dict()}), created_status

    reason = result.rejection.value
    payload = {"ok": False, "error": reason, "message": REASON_MESSAGES.get(reason, reason)}
    if result.record is not None:
        payload["record"] = result.record.to_dict()
    return jsonify(payload), _REJECTION_STATUS[result.rejection]


def _context_from(data) -> CheckinContext:
    device_info = data.get("deviceInfo")
    if device_info is not None and not isinstance(device_info, str):
        device_info = json.dumps(device_info, sort_keys=True)
    return CheckinContext(
        latitude=optional_float(data.get("lat"), "lat"),
        longitude=optional_float(data.get("lon"), "lon"),
        device_info=device_info[:_DEVICE_INFO_MAX] if device_info else None,
    )


def _parse_date(value: str, field_name: str) -> date:
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be YYYY-MM-DD") from None


def _parse_clock(value: Optional[str], work_date: date, field_name: str) -> Optional[datetime]:
    """Accept 'HH:MM[:SS]' on ``work_date`` or a full ISO datetime."""

    if not value:
        return None
    try:
        if "T" in value or " " in value.strip():
            return datetime.fromisoformat(value.strip())
        return datetime.combine(work_date, parse_time_of_day(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be HH:MM or an ISO datetime") from None


def register(app: Flask, container: Container) -> None:
    hr_required = roles_required([Role.HR, Role.SUPERADMIN])
    service = container.attendance_service

    @app.route("/attendance/checkin", methods=["POST"], endpoint="attendance_checkin")
    def attendance_checkin():
        """Scan-based check-in from an employee device (public)."""
        data = json_body()
        session_id = require_non_empty(data.get("session_id"), "session_id")
        employee_id = require_non_empty(
            str(data["employee_id"]) if data.get("employee_id") is not None else None,
            "employee_id",
        )

        result = service.checkin(session_id, employee_id, _context_from(data))
        return _checkin_response(result)

    @app.route("/attendance/checkin/image", methods=["POST"], endpoint="attendance_checkin_image")
    def attendance_checkin_image():
        """Check-in from an uploaded photo of the displayed QR code."""
        if "image" not in request.files:
            raise ValidationError("Missing image file")
        employee_id = require_non_empty(request.form.get("employee_id"), "employee_id")

        result = service.checkin_by_image(request.files["image"].stream, employee_id, _context_from(request.form))
        return _checkin_response(result)

    @app.route("/attendance/checkout", methods=["POST"], endpoint="attendance_checkout")
    def attendance_checkout():
        data = json_body()
        ident = data.get("employee_id") or data.get("email")
        if ident is None or ident == "":
            raise ValidationError("missing employee identifier")

        record = service.checkout(ident)
        return jsonify({"ok": True, "record": record.to_dict()})

    @app.route("/attendance/break", methods=["POST"], endpoint="attendance_break")
    def attendance_break():
        data = json_body()
        ident = data.get("employee_id") or data.get("email")
        if ident is None or ident == "":
            raise ValidationError("missing employee identifier")

        record = service.toggle_break(ident, data.get("action"))
        return jsonify({"ok": True, "record": record.to_dict()})

    @app.route("/attendance", methods=["POST"], endpoint="attendance_manual")
    @token_required
    def attendance_manual():
        """Manual entry (no QR): status derived from the schedule unless given."""
        data = json_body()
        ident = data.get("employee_id") or data.get("email")
        if ident is None or ident == "":
            raise ValidationError("missing employee identifier")

        result = service.manual_checkin(ident, status=data.get("status"))
        return _checkin_response(result, created_status=201)

    @app.route("/attendance/override", methods=["POST"], endpoint="attendance_override")
    @hr_required
    def attendance_override():
        data = json_body()
        ident = data.get("employee_id")
        if ident is None or ident == "":
            raise ValidationError("employee_id, date and status are required")
        work_date = _parse_date(require_non_empty(data.get("date"), "date"), "date")
        status = require_non_empty(data.get("status"), "status")

        principal = current_principal()
        record = service.override(
            ident,
            work_date=work_date,
            status=status,
            time_in=_parse_clock(data.get("time_in"), work_date, "time_in"),
            time_out=_parse_clock(data.get("time_out"), work_date, "time_out"),
            reason=data.get("reason"),
            actor_id=principal.user_id if principal else None,
        )
        return jsonify({"message": "Attendance record updated successfully.", "record": record.to_dict()})

    @app.route("/attendance/history", methods=["GET"], endpoint="attendance_history")
    @token_required
    def attendance_history():
        today = date.today()
        start_s = request.args.get("start") or (today - timedelta(days=DEFAULT_HISTORY_DAYS)).strftime("%Y-%m-%d")
        end_s = request.args.get("end") or today.strftime("%Y-%m-%d")

        records = service.history(
            start=_parse_date(start_s, "start"),
            end=_parse_date(end_s, "end"),
            employee_identifier=request.args.get("employee") or None,
        )
        return jsonify([r.to_dict() for r in records])
