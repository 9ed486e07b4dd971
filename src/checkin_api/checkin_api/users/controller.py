from __future__ import annotations

from flask import Flask

from ..common.responses import auth_required, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = auth_required(container.auth_service)

    @app.route("/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = json_body()
        user = container.auth_service.register(
            full_name=data.get("full_name"),
            email=data.get("email"),
            password=data.get("password"),
            phone_number=data.get("phone_number"),
        )
        return ok(user.to_dict(), 201, "user registered")

    @app.route("/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        tokens = container.auth_service.login(email=data.get("email"), password=data.get("password"))
        return ok(tokens.to_dict())

    @app.route("/auth/refresh", methods=["POST"], endpoint="auth_refresh")
    def auth_refresh():
        data = json_body()
        tokens = container.auth_service.refresh_token(data.get("refresh_token") or "")
        return ok(tokens.to_dict())

    @app.route("/users/me", methods=["GET"], endpoint="users_me")
    @login_required
    def users_me(caller_id: str):
        return ok(container.user_service.get_profile(caller_id).to_dict())

    @app.route("/users/me", methods=["PUT"], endpoint="users_me_update")
    @login_required
    def users_me_update(caller_id: str):
        data = json_body()
        user = container.user_service.update_profile(
            caller_id,
            full_name=data.get("full_name"),
            phone_number=data.get("phone_number"),
        )
        return ok(user.to_dict(), message="profile updated")
