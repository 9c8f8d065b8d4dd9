from __future__ import annotations

import io

import pytest

from workline.core.enums import Role

from ..conftest import bearer


def _generate(client, headers, **body):
    body.setdefault("type", "rotating")
    resp = client.post("/qr/generate", json=body, headers=headers)
    assert resp.status_code == 200
    return resp.get_json()["session"]


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_generate_returns_session_with_image(client, hr_headers):
    session = _generate(client, hr_headers, duration_minutes=2)

    assert session["type"] == "rotating"
    assert session["is_active"] is True
    assert session["imageDataUrl"].startswith("data:image/png;base64,")


def test_generate_requires_token(client):
    resp = client.post("/qr/generate", json={"type": "rotating"})

    assert resp.status_code == 401
    assert resp.get_json()["ok"] is False


def test_generate_rejects_bad_token(client):
    resp = client.post("/qr/generate", json={}, headers={"Authorization": "Bearer not-a-jwt"})

    assert resp.status_code == 401
    assert resp.get_json()["error"] == "invalid_token"


def test_generate_forbidden_for_employee(client, employee_headers):
    resp = client.post("/qr/generate", json={"type": "static"}, headers=employee_headers)

    assert resp.status_code == 403
    assert resp.get_json()["error"] == "forbidden"


def test_generate_validates_duration(client, hr_headers):
    resp = client.post("/qr/generate", json={"type": "rotating", "duration_minutes": -3}, headers=hr_headers)

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


def test_current_and_revoke(client, hr_headers):
    assert client.get("/qr/current", headers=hr_headers).status_code == 404

    session = _generate(client, hr_headers, type="static")
    current = client.get("/qr/current", headers=hr_headers).get_json()["session"]
    assert current["session_id"] == session["session_id"]
    assert current["imageDataUrl"]

    revoked = client.post("/qr/revoke", headers=hr_headers).get_json()
    assert revoked["revokedCount"] == 1
    resp = client.get("/qr/current", headers=hr_headers)
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"


def test_superadmin_can_manage_qr(client):
    _generate(client, bearer(Role.SUPERADMIN), type="static")


def test_printable_png(client, hr_headers):
    session = _generate(client, hr_headers, type="static")

    resp = client.get(f"/qr/{session['session_id']}/image.png", headers=hr_headers)

    assert resp.status_code == 200
    assert resp.mimetype == "image/png"
    assert resp.data.startswith(b"\x89PNG")
    assert client.get("/qr/qr_missing/image.png", headers=hr_headers).status_code == 404


def test_checkin_flow_and_duplicate(client, hr_headers):
    session = _generate(client, hr_headers)

    resp = client.post(
        "/attendance/checkin",
        json={"session_id": session["session_id"], "employee_id": 3, "lat": 10.1, "lon": "106.2", "deviceInfo": {"ua": "x"}},
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["ok"] is True
    assert body["record"]["status"] == "present"
    assert body["record"]["method"] == "qr_scan"

    again = client.post("/attendance/checkin", json={"session_id": session["session_id"], "employee_id": "asmith"})
    assert again.status_code == 409
    again_body = again.get_json()
    assert again_body["error"] == "already_checked_in"
    assert again_body["record"]["id"] == body["record"]["id"]


@pytest.mark.parametrize(
    "payload, status, error",
    [
        ({"session_id": "qr_x", "employee_id": "nobody"}, 404, "employee_not_found"),
        ({"session_id": "qr_x", "employee_id": 2}, 404, "session_not_found"),
        ({"employee_id": 2}, 400, "validation_error"),
        ({"session_id": "qr_x"}, 400, "validation_error"),
    ],
)
def test_checkin_rejections(client, payload, status, error):
    resp = client.post("/attendance/checkin", json=payload)

    assert resp.status_code == status
    assert resp.get_json()["error"] == error


def test_checkin_with_revoked_session_is_gone(client, hr_headers):
    session = _generate(client, hr_headers)
    client.post("/qr/revoke", headers=hr_headers)

    resp = client.post("/attendance/checkin", json={"session_id": session["session_id"], "employee_id": 2})

    assert resp.status_code == 410
    body = resp.get_json()
    assert body["error"] == "session_inactive"
    assert body["message"]


def test_checkin_rejects_non_object_body(client):
    resp = client.post("/attendance/checkin", json=["qr_x", 2])

    assert resp.status_code == 400


def test_checkin_image_requires_file(client):
    resp = client.post("/attendance/checkin/image", data={"employee_id": "2"})

    assert resp.status_code == 400


def test_checkin_image_without_qr(client, zbar):
    from PIL import Image

    buf = io.BytesIO()
    Image.new("RGB", (64, 64), "white").save(buf, format="PNG")
    buf.seek(0)

    resp = client.post(
        "/attendance/checkin/image",
        data={"employee_id": "2", "image": (buf, "blank.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "qr_not_detected"


def test_checkin_image_without_zbar_is_unavailable(client, monkeypatch):
    import workline.attendance.service as attendance_service

    def missing_zbar(stream):
        raise ImportError("Unable to find zbar shared library")

    monkeypatch.setattr(attendance_service, "decode_image", missing_zbar)

    resp = client.post(
        "/attendance/checkin/image",
        data={"employee_id": "2", "image": (io.BytesIO(b"png"), "qr.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 503
    assert resp.get_json()["error"] == "qr_decoder_unavailable"


def test_checkin_image_decodes_session(client, hr_headers, zbar):
    from workline.qr_sessions.rendering import render_png

    session = _generate(client, hr_headers)

    resp = client.post(
        "/attendance/checkin/image",
        data={"employee_id": "3", "image": (io.BytesIO(render_png(session["session_id"], border=4)), "qr.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    assert resp.get_json()["record"]["employee_id"] == 3


def test_checkout_and_break(client, hr_headers):
    session = _generate(client, hr_headers, type="static")
    client.post("/attendance/checkin", json={"session_id": session["session_id"], "employee_id": 3})

    started = client.post("/attendance/break", json={"email": "asmith@example.com", "action": "in"})
    assert started.status_code == 200
    assert started.get_json()["record"]["break_start"]

    ended = client.post("/attendance/break", json={"employee_id": 3, "action": "out"})
    assert ended.status_code == 200
    assert ended.get_json()["record"]["break_end"]

    not_started = client.post("/attendance/break", json={"employee_id": 3, "action": "out"})
    assert not_started.status_code == 409
    assert not_started.get_json()["error"] == "break_not_started"

    out = client.post("/attendance/checkout", json={"employee_id": 3})
    assert out.status_code == 200
    assert out.get_json()["record"]["time_out"]

    again = client.post("/attendance/checkout", json={"employee_id": 3})
    assert again.status_code == 409
    assert again.get_json()["error"] == "no_open_record"


def test_checkout_requires_identifier(client):
    assert client.post("/attendance/checkout", json={}).status_code == 400


def test_manual_checkin_requires_token(client, employee_headers):
    assert client.post("/attendance", json={"employee_id": 3}).status_code == 401

    resp = client.post("/attendance", json={"employee_id": 3, "status": "present"}, headers=employee_headers)
    assert resp.status_code == 201
    assert resp.get_json()["record"]["method"] == "manual"


def test_override_is_hr_only(client, hr_headers, employee_headers, container):
    payload = {"employee_id": 2, "date": "2026-01-15", "status": "present", "time_in": "09:00", "reason": "forgot"}

    assert client.post("/attendance/override", json=payload, headers=employee_headers).status_code == 403

    resp = client.post("/attendance/override", json=payload, headers=hr_headers)
    assert resp.status_code == 200
    record = resp.get_json()["record"]
    assert record["time_in"] == "2026-01-15T09:00:00"
    assert record["method"] == "override"
    assert container.audit_log.entries[-1]["actor_id"] == 1


def test_override_validates_date(client, hr_headers):
    resp = client.post(
        "/attendance/override",
        json={"employee_id": 2, "date": "15/01/2026", "status": "present"},
        headers=hr_headers,
    )

    assert resp.status_code == 400


def test_history(client, hr_headers, employee_headers):
    client.post("/attendance", json={"employee_id": 3}, headers=hr_headers)

    assert client.get("/attendance/history").status_code == 401
    rows = client.get("/attendance/history?employee=asmith", headers=employee_headers).get_json()
    assert [r["employee_id"] for r in rows] == [3]
    assert client.get("/attendance/history?start=2026-02-10&end=2026-02-01", headers=hr_headers).status_code == 400


def test_assign_schedule(client, hr_headers, employee_headers):
    body = {"employee_id": 2, "work_date": "2026-02-02", "start_time": "08:00"}

    assert client.put("/schedules", json=body, headers=employee_headers).status_code == 403
    resp = client.put("/schedules", json=body, headers=hr_headers)
    assert resp.status_code == 200
    assert resp.get_json()["schedule_id"] == 1
    assert client.put("/schedules", json={**body, "employee_id": 99}, headers=hr_headers).status_code == 404
    assert client.put("/schedules", json={**body, "start_time": "8am"}, headers=hr_headers).status_code == 400


def test_unknown_route_is_json(client):
    resp = client.get("/nope")

    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"
