from __future__ import annotations

from flask import Flask

from ..common.responses import auth_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = auth_required(container.auth_service)

    @app.route("/organizations/<org_id>/reports/groups/<group_id>", methods=["GET"], endpoint="reports_group")
    @login_required
    def reports_group(caller_id: str, org_id: str, group_id: str):
        report = container.report_service.get_group_performance(caller_id=caller_id, org_id=org_id, group_id=group_id)
        return ok(report.to_dict())
