from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, json_body, make_login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service)
    service = container.task_service

    @app.route("/tasks", methods=["GET"], endpoint="list_tasks")
    @login_required
    def list_tasks():
        tasks = service.list_for_user(current_user_id())
        return ok(data=[service.describe(t) for t in tasks], no_cache=True)

    @app.route("/tasks", methods=["POST"], endpoint="create_task")
    @login_required
    def create_task():
        task = service.create(current_user_id(), json_body())
        return ok(201, data=service.describe(task), no_cache=True)

    @app.route("/tasks/<task_id>", methods=["GET"], endpoint="get_task")
    @login_required
    def get_task(task_id: str):
        return ok(data=service.describe(service.get(task_id, current_user_id())), no_cache=True)

    @app.route("/tasks/<task_id>", methods=["PUT"], endpoint="update_task")
    @login_required
    def update_task(task_id: str):
        task = service.update(task_id, current_user_id(), json_body())
        return ok(data=service.describe(task), no_cache=True)

    @app.route("/tasks/<task_id>", methods=["DELETE"], endpoint="delete_task")
    @login_required
    def delete_task(task_id: str):
        service.delete(task_id, current_user_id())
        return ok(message="Task deleted", no_cache=True)
