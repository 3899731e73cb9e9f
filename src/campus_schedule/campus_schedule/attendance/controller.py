from __future__ import annotations

import logging

from flask import Flask, request

from ..common.web import current_user_id, json_body, make_login_required, ok
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ValidationError
from .qr import attendance_url, decode_qr_image, extract_attendance_code

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service)
    ledger = container.attendance_ledger
    history = container.history_service

    @app.route("/subjects/<subject_id>/attendance", methods=["PATCH"], endpoint="record_attendance")
    @login_required
    def record_attendance(subject_id: str):
        data = json_body(required=False)
        result = ledger.record_attendance(
            subject_id,
            current_user_id(),
            attendance_date=data.get("rescheduleDate") or data.get("attendanceDate"),
            action=data.get("action"),
        )
        return ok(no_cache=True, **result.to_dict())

    @app.route("/subjects/<subject_id>/check-in", methods=["POST"], endpoint="check_in")
    @login_required
    def check_in(subject_id: str):
        data = json_body(required=False)
        result = ledger.check_in(
            subject_id,
            current_user_id(),
            attendance_date=data.get("rescheduleDate") or data.get("attendanceDate"),
            location=data.get("location"),
            notes=data.get("notes"),
        )
        status = 200 if result.already_recorded else 201
        return ok(status, no_cache=True, **result.to_dict())

    @app.route("/subjects/attendance-summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def attendance_summary():
        return ok(no_cache=True, **ledger.summary(current_user_id()))

    @app.route("/attendance-history", methods=["GET"], endpoint="list_attendance_history")
    @login_required
    def list_attendance_history():
        try:
            limit = int(request.args.get("limit", DEFAULT_HISTORY_LIMIT))
        except ValueError:
            raise ValidationError("limit must be an integer", field="limit")
        return ok(no_cache=True, **history.list_history(current_user_id(), limit=limit))

    @app.route("/attendance-history", methods=["POST"], endpoint="append_attendance_history")
    @login_required
    def append_attendance_history():
        record = history.append(current_user_id(), json_body())
        return ok(201, message="Attendance recorded", record=record.to_dict())

    @app.route("/attendance-status", methods=["GET"], endpoint="attendance_status")
    @login_required
    def attendance_status():
        result = history.attendance_status(
            current_user_id(),
            day=request.args.get("date", ""),
            subject_id=request.args.get("subjectId") or None,
        )
        return ok(no_cache=True, **result)

    @app.route("/attendance/scan", methods=["POST"], endpoint="attendance_scan")
    @login_required
    def attendance_scan():
        upload = request.files.get("image")
        if upload is not None:
            scanned_text = decode_qr_image(upload.stream)
            subject_id = request.form.get("subjectId")
        else:
            data = json_body()
            scanned_text = data.get("text") or ""
            subject_id = data.get("subjectId")

        code = extract_attendance_code(scanned_text)
        if not code:
            raise ValidationError("Invalid attendance QR code", field="text")
        if not subject_id:
            raise ValidationError("subjectId is required", field="subjectId")

        result = ledger.check_in(subject_id, current_user_id(), code=code)
        logger.info("scan accepted for subject %s (code %s)", subject_id, code)
        status = 200 if result.already_recorded else 201
        return ok(status, no_cache=True, code=code, url=attendance_url(code), **result.to_dict())

    @app.route("/init-attendance", methods=["POST"], endpoint="init_attendance")
    @login_required
    def init_attendance():
        result = container.subject_service.initialize_attendance_dates(current_user_id())
        return ok(message="Attendance dates initialized", **result)
