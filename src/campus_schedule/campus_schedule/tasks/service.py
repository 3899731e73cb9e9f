from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_utc, parse_iso_date
from ..core.enums import TaskPriority, TaskStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..subjects.repository import SubjectRepository
from ..subjects.service import resolve_owned_subject
from .model import Task
from .repository import TaskRepository

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _text(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string", field=key)
    return value.strip() or None


class TaskService:
    """Use cases: coursework tasks, optionally linked to one of the owner's subjects."""

    def __init__(
        self,
        tasks: TaskRepository,
        subjects: SubjectRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._tasks = tasks
        self._subjects = subjects
        self._clock = clock

    def _normalize(self, user_id: str, data: Mapping[str, Any], *, partial: bool) -> dict:
        if not isinstance(data, Mapping):
            raise ValidationError("Task payload must be an object")

        out: dict = {}
        if "title" in data or not partial:
            title = _text(data, "title")
            if not title:
                raise ValidationError("Title is required and cannot be empty", field="title")
            out["title"] = title

        if "dueDate" in data or not partial:
            due_date = _text(data, "dueDate")
            if not due_date:
                raise ValidationError("Due date is required", field="dueDate")
            parse_iso_date(due_date)
            out["dueDate"] = due_date

        if "dueTime" in data:
            due_time = _text(data, "dueTime")
            if due_time and not TIME_RE.match(due_time):
                raise ValidationError("dueTime must be HH:MM", field="dueTime")
            out["dueTime"] = due_time

        if "description" in data or not partial:
            out["description"] = _text(data, "description") or ""
        for key in ("submissionLink", "category"):
            if key in data:
                out[key] = _text(data, key)

        if "priority" in data or not partial:
            try:
                out["priority"] = TaskPriority(data.get("priority") or TaskPriority.MEDIUM).value
            except ValueError:
                raise ValidationError("priority must be low, medium or high", field="priority")
        if "status" in data or not partial:
            try:
                out["status"] = TaskStatus(data.get("status") or TaskStatus.IN_PROGRESS).value
            except ValueError:
                raise ValidationError("status must be pending, in-progress or completed", field="status")

        if "subjectId" in data:
            subject_key = _text(data, "subjectId")
            # Linked tasks always store the subject's string id.
            out["subjectId"] = (
                resolve_owned_subject(self._subjects, subject_key, user_id).external_id if subject_key else None
            )
        return out

    def describe(self, task: Task) -> dict:
        subject = None
        if task.subject_id:
            subject = self._subjects.find_one_by_alternate_keys(task.subject_id, user_id=task.user_id)
        return task.to_dict(subject)

    def list_for_user(self, user_id: str) -> Sequence[Task]:
        return self._tasks.list_for_user(user_id)

    def get(self, task_key: str, user_id: str) -> Task:
        task = self._tasks.find_one_by_alternate_keys(task_key, user_id=user_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def create(self, user_id: str, data: Mapping[str, Any]) -> Task:
        fields = self._normalize(user_id, data, partial=False)
        fields.setdefault("subjectId", None)
        task = self._tasks.create(user_id=user_id, fields=fields, at=self._clock())
        logger.info("task %s created for user %s", task.external_id, user_id)
        return task

    def update(self, task_key: str, user_id: str, data: Mapping[str, Any]) -> Task:
        fields = self._normalize(user_id, data, partial=True)
        if not fields:
            raise ValidationError("Nothing to update")
        task = self._tasks.update_fields(task_key, user_id=user_id, fields=fields, at=self._clock())
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def delete(self, task_key: str, user_id: str) -> None:
        if not self._tasks.delete(task_key, user_id=user_id):
            raise NotFoundError("Task not found")
        logger.info("task %s deleted for user %s", task_key, user_id)
