from __future__ import annotations

from flask import Flask

from ..common.responses import auth_required, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = auth_required(container.auth_service)
    orgs = container.organization_service

    @app.route("/organizations", methods=["POST"], endpoint="organizations_create")
    @login_required
    def organizations_create(caller_id: str):
        data = json_body()
        org = orgs.create_organization(
            caller_id=caller_id,
            name=data.get("name"),
            email=data.get("email"),
            default_location_lat=data.get("default_location_lat"),
            default_location_long=data.get("default_location_long"),
        )
        return ok(org.to_dict(), 201, "organization created")

    @app.route("/organizations", methods=["GET"], endpoint="organizations_list")
    @login_required
    def organizations_list(caller_id: str):
        return ok([o.to_dict() for o in orgs.list_organizations(caller_id)])

    @app.route("/organizations/<org_id>", methods=["GET"], endpoint="organizations_get")
    @login_required
    def organizations_get(caller_id: str, org_id: str):
        return ok(orgs.get_organization(org_id).to_dict())

    @app.route("/organizations/<org_id>", methods=["PUT"], endpoint="organizations_update")
    @login_required
    def organizations_update(caller_id: str, org_id: str):
        data = json_body()
        org = orgs.update_organization(
            caller_id=caller_id,
            org_id=org_id,
            name=data.get("name"),
            email=data.get("email"),
            default_location_lat=data.get("default_location_lat"),
            default_location_long=data.get("default_location_long"),
        )
        return ok(org.to_dict(), message="organization updated")

    @app.route("/organizations/<org_id>", methods=["DELETE"], endpoint="organizations_delete")
    @login_required
    def organizations_delete(caller_id: str, org_id: str):
        orgs.delete_organization(caller_id=caller_id, org_id=org_id)
        return ok(message="organization deleted")

    @app.route("/organizations/<org_id>/invitations", methods=["POST"], endpoint="organizations_invite")
    @login_required
    def organizations_invite(caller_id: str, org_id: str):
        data = json_body()
        member = orgs.invite_employee(
            caller_id=caller_id,
            org_id=org_id,
            email=data.get("email"),
            role=data.get("role"),
            group_id=data.get("group_id"),
        )
        return ok(member.to_dict(), 201, "member invited")

    @app.route("/organizations/<org_id>/shifts", methods=["POST"], endpoint="organizations_create_shift")
    @login_required
    def organizations_create_shift(caller_id: str, org_id: str):
        data = json_body()
        shift = orgs.create_shift(
            caller_id=caller_id,
            org_id=org_id,
            name=data.get("name"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            timezone=data.get("timezone"),
            allowed_late_minutes=data.get("allowed_late_minutes", 0),
            working_days=data.get("working_days") or (),
        )
        return ok(shift.to_dict(), 201, "shift created")

    @app.route("/organizations/<org_id>/groups", methods=["POST"], endpoint="organizations_create_group")
    @login_required
    def organizations_create_group(caller_id: str, org_id: str):
        data = json_body()
        group = orgs.create_group(
            caller_id=caller_id,
            org_id=org_id,
            name=data.get("name"),
            shift_id=data.get("shift_id"),
            manager_id=data.get("manager_id"),
        )
        return ok(group.to_dict(), 201, "group created")

    @app.route("/organizations/<org_id>/members/<user_id>", methods=["PUT"], endpoint="organizations_assign_group")
    @login_required
    def organizations_assign_group(caller_id: str, org_id: str, user_id: str):
        data = json_body()
        orgs.assign_user_to_group(caller_id=caller_id, org_id=org_id, user_id=user_id, group_id=data.get("group_id"))
        return ok(message="group assigned")

    @app.route("/organizations/<org_id>/employees", methods=["GET"], endpoint="organizations_employees")
    @login_required
    def organizations_employees(caller_id: str, org_id: str):
        members = orgs.get_employees(caller_id=caller_id, org_id=org_id)
        return ok([m.to_dict() for m in members])

    @app.route("/organizations/<org_id>/employees/<user_id>", methods=["PUT"], endpoint="organizations_update_employee")
    @login_required
    def organizations_update_employee(caller_id: str, org_id: str, user_id: str):
        data = json_body()
        member = orgs.update_employee(
            caller_id=caller_id,
            org_id=org_id,
            target_user_id=user_id,
            new_role=data.get("role"),
            new_group_id=data.get("group_id"),
        )
        return ok(member.to_dict(), message="member updated")

    @app.route("/organizations/<org_id>/employees/<user_id>", methods=["DELETE"], endpoint="organizations_remove_employee")
    @login_required
    def organizations_remove_employee(caller_id: str, org_id: str, user_id: str):
        orgs.remove_employee(caller_id=caller_id, org_id=org_id, target_user_id=user_id)
        return ok(message="member removed")
