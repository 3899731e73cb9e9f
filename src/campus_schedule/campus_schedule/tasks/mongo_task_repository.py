from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument

from ..core.enums import TaskPriority, TaskStatus
from ..database.bootstrap import TASKS
from ..database.connection import DatabaseConnection
from ..database.mongo_base import alternate_key_filter, scoped
from .model import Task
from .repository import TaskRepository


def _to_task(doc: Mapping[str, Any]) -> Task:
    return Task(
        task_id=str(doc["_id"]),
        external_id=str(doc.get("id") or doc["_id"]),
        user_id=str(doc.get("userId") or ""),
        title=doc.get("title") or "",
        due_date=doc.get("dueDate") or "",
        description=doc.get("description") or "",
        priority=doc.get("priority") or TaskPriority.MEDIUM.value,
        status=doc.get("status") or TaskStatus.IN_PROGRESS.value,
        due_time=doc.get("dueTime"),
        submission_link=doc.get("submissionLink"),
        category=doc.get("category"),
        subject_id=doc.get("subjectId"),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


class MongoTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @property
    def _tasks(self):
        return self._conn_factory.db[TASKS]

    def list_for_user(self, user_id: str) -> Sequence[Task]:
        cursor = self._tasks.find({"userId": str(user_id)}).sort("createdAt", DESCENDING)
        return [_to_task(d) for d in cursor]

    def find_one_by_alternate_keys(self, task_key: str, *, user_id: str) -> Optional[Task]:
        doc = self._tasks.find_one(scoped(alternate_key_filter(task_key), user_id=user_id))
        return _to_task(doc) if doc else None

    def create(self, *, user_id: str, fields: Mapping[str, Any], at: datetime) -> Task:
        oid = ObjectId()
        doc = dict(fields)
        doc.update({"_id": oid, "id": str(oid), "userId": str(user_id), "createdAt": at, "updatedAt": at})
        self._tasks.insert_one(doc)
        return _to_task(doc)

    def update_fields(self, task_key: str, *, user_id: str, fields: Mapping[str, Any], at: datetime) -> Optional[Task]:
        doc = self._tasks.find_one_and_update(
            scoped(alternate_key_filter(task_key), user_id=user_id),
            {"$set": {**dict(fields), "updatedAt": at}},
            return_document=ReturnDocument.AFTER,
        )
        return _to_task(doc) if doc else None

    def delete(self, task_key: str, *, user_id: str) -> bool:
        return self._tasks.delete_one(scoped(alternate_key_filter(task_key), user_id=user_id)).deleted_count > 0
