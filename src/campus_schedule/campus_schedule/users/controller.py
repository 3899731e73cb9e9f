from __future__ import annotations

from flask import Flask, request

from ..common.web import (
    clear_auth_cookies,
    current_identity,
    current_user_id,
    json_body,
    make_login_required,
    ok,
    set_remember_cookie,
    set_session_cookie,
)
from ..container import Container
from ..core.constants import AUTH_COOKIE, REMEMBER_COOKIE


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service)

    @app.route("/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = json_body()
        user = container.auth_service.register(
            name=data.get("name") or "",
            email=data.get("email") or "",
            password=data.get("password") or "",
        )
        return ok(201, message="Registration successful! Please login.", user=user)

    @app.route("/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        result = container.auth_service.login(
            email=data.get("email") or "",
            password=data.get("password") or "",
            remember_me=bool(data.get("rememberMe", False)),
        )

        resp = ok(message="Login successful", user=result.user, no_cache=True)
        set_session_cookie(resp, result.session_token, max_age=container.tokens.session_max_age)
        if result.remember_token:
            set_remember_cookie(resp, result.remember_token, max_age=container.tokens.remember_max_age)
        else:
            resp.delete_cookie(REMEMBER_COOKIE, path="/")
        return resp

    @app.route("/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        container.auth_service.logout(
            request.cookies.get(AUTH_COOKIE),
            request.cookies.get(REMEMBER_COOKIE),
        )
        resp = ok(message="Logout successful", no_cache=True)
        clear_auth_cookies(resp)
        return resp

    @app.route("/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def auth_me():
        user = container.auth_service.current_user(current_identity())
        return ok(user=user, no_cache=True)

    @app.route("/user/change-password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password():
        data = json_body()
        container.auth_service.change_password(
            current_identity(),
            current_password=data.get("currentPassword") or "",
            new_password=data.get("newPassword") or "",
        )
        return ok(message="Password changed successfully", no_cache=True)

    @app.route("/user/profile", methods=["GET"], endpoint="get_profile")
    @login_required
    def get_profile():
        return ok(user=container.user_service.get_profile(current_user_id()), no_cache=True)

    @app.route("/user/profile", methods=["PUT"], endpoint="update_profile")
    @login_required
    def update_profile():
        user = container.user_service.update_profile(current_user_id(), json_body())
        return ok(message="Profile updated", user=user, no_cache=True)
