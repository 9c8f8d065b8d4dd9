from __future__ import annotations

from typing import Any, Optional

from flask import jsonify, request

from ..core.exceptions import DomainError, ValidationError

# Messages the scanning client can show verbatim.
REASON_MESSAGES = {
    "employee_not_found": "Employee not found. Check the ID you entered.",
    "session_not_found": "This QR code is not recognised. Scan the code on the HR screen.",
    "session_inactive": "This QR code has been replaced or revoked. Scan the current code.",
    "session_expired": "This QR code has expired. Ask HR to regenerate it.",
    "already_checked_in": "You have already checked in today.",
    "no_open_record": "No open attendance record for today.",
    "break_not_started": "No break in progress.",
    "qr_decoder_unavailable": "Photo check-in is unavailable right now. Scan the code instead.",
}


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def error_response(err: DomainError, *, extra: Optional[dict] = None):
    payload: dict[str, Any] = {
        "ok": False,
        "error": err.reason,
        "message": REASON_MESSAGES.get(err.reason, str(err)),
    }
    if extra:
        payload.update(extra)
    return jsonify(payload), err.status_code
