from __future__ import annotations

from flask import Flask

from ..common.responses import auth_required, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = auth_required(container.auth_service)
    attendance = container.attendance_service

    @app.route("/organizations/<org_id>/tasks", methods=["POST"], endpoint="tasks_create")
    @login_required
    def tasks_create(caller_id: str, org_id: str):
        data = json_body()
        task = attendance.create_task(
            caller_id=caller_id,
            org_id=org_id,
            title=data.get("title"),
            assigned_user_id=data.get("assigned_user_id"),
            geofencing_enabled=bool(data.get("geofencing_enabled", False)),
            location_name=data.get("location_name") or "",
            latitude=data.get("latitude", 0.0),
            longitude=data.get("longitude", 0.0),
            radius_meters=data.get("radius_meters", 0),
        )
        return ok(task.to_dict(), 201, "task created")

    @app.route("/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def attendance_check_in(caller_id: str):
        data = json_body()
        record = attendance.check_in(
            caller_id=caller_id,
            org_id=data.get("org_id"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            task_id=data.get("task_id"),
            note=data.get("note") or "",
        )
        return ok(record.to_dict(), 201, "checked in")

    @app.route("/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def attendance_check_out(caller_id: str):
        record = attendance.check_out(caller_id=caller_id)
        return ok(record.to_dict(), message="checked out")

    @app.route("/attendance/current", methods=["GET"], endpoint="attendance_current")
    @login_required
    def attendance_current(caller_id: str):
        record = attendance.get_current_status(caller_id)
        return ok(record.to_dict() if record else None)
