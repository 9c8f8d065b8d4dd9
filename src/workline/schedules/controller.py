from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import roles_required
from ..common.datetime_utils import parse_iso_date, parse_time_of_day
from ..common.http import json_body
from ..common.validators import require_non_empty
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    hr_required = roles_required([Role.HR, Role.SUPERADMIN])

    @app.route("/schedules", methods=["PUT"], endpoint="schedules_assign")
    @hr_required
    def schedules_assign():
        data = json_body()
        try:
            employee_id = int(data.get("employee_id") or 0)
            work_date = parse_iso_date(require_non_empty(data.get("work_date"), "work_date"))
            start_time = parse_time_of_day(require_non_empty(data.get("start_time"), "start_time"))
        except (TypeError, ValueError):
            raise ValidationError("employee_id, work_date (YYYY-MM-DD) and start_time (HH:MM) are required") from None

        schedule_id = container.schedule_service.assign(
            employee_id=employee_id,
            work_date=work_date,
            start_time=start_time,
            note=data.get("note"),
        )
        return jsonify({"schedule_id": schedule_id})
