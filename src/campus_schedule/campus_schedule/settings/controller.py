from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, json_body, make_login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service)
    service = container.settings_service

    @app.route("/settings", methods=["GET"], endpoint="get_settings")
    @login_required
    def get_settings():
        return ok(data=service.get(current_user_id()).to_dict(), no_cache=True)

    @app.route("/settings", methods=["POST", "PUT"], endpoint="save_settings")
    @login_required
    def save_settings():
        saved = service.save(current_user_id(), json_body())
        return ok(message="Settings saved", data=saved.to_dict(), no_cache=True)
