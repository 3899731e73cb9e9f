from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, json_body, make_login_required, ok
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service)
    service = container.subject_service

    @app.route("/subjects", methods=["GET"], endpoint="list_subjects")
    @login_required
    def list_subjects():
        subjects = service.list_for_user(current_user_id())
        return ok(subjects=[s.to_dict() for s in subjects], no_cache=True)

    @app.route("/subjects", methods=["POST"], endpoint="create_subjects")
    @login_required
    def create_subjects():
        data = json_body()
        if "subjects" in data:
            items = data["subjects"]
            if not isinstance(items, list):
                raise ValidationError("subjects must be a list", field="subjects")
            created = service.create_many(current_user_id(), items)
            return ok(
                201,
                message=f"{len(created)} subjects added",
                insertedCount=len(created),
                subjects=[s.to_dict() for s in created],
            )

        subject = service.create(current_user_id(), data)
        return ok(201, message="Subject added", subject=subject.to_dict())

    @app.route("/subjects/delete-all", methods=["DELETE"], endpoint="delete_all_subjects")
    @login_required
    def delete_all_subjects():
        count = service.delete_all(current_user_id())
        return ok(message=f"{count} subjects deleted", deletedCount=count)

    @app.route("/subjects/<subject_id>", methods=["GET"], endpoint="get_subject")
    @login_required
    def get_subject(subject_id: str):
        subject = service.get_owned(subject_id, current_user_id())
        return ok(subject=subject.to_dict(), meetings=service.meeting_overview(subject), no_cache=True)

    @app.route("/subjects/<subject_id>", methods=["PUT"], endpoint="update_subject")
    @login_required
    def update_subject(subject_id: str):
        subject = service.update(subject_id, current_user_id(), json_body())
        return ok(message="Subject updated", subject=subject.to_dict())

    @app.route("/subjects/<subject_id>", methods=["DELETE"], endpoint="delete_subject")
    @login_required
    def delete_subject(subject_id: str):
        service.delete(subject_id, current_user_id())
        return ok(message="Subject deleted")

    @app.route("/subjects/<subject_id>/reschedule", methods=["POST"], endpoint="reschedule_subject")
    @login_required
    def reschedule_subject(subject_id: str):
        reschedule = service.add_reschedule(subject_id, current_user_id(), json_body())
        return ok(201, message="Reschedule added", reschedule=reschedule.to_dict())
