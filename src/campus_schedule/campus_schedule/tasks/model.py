from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import TaskPriority, TaskStatus
from ..subjects.model import Subject


@dataclass(frozen=True)
class Task:
    """Domain entity: a coursework task owned by one user.

    ``subject_id`` holds the linked subject's string ``id``, if any.
    """

    task_id: str
    external_id: str
    user_id: str
    title: str
    due_date: str
    description: str = ""
    priority: str = TaskPriority.MEDIUM.value
    status: str = TaskStatus.IN_PROGRESS.value
    due_time: Optional[str] = None
    submission_link: Optional[str] = None
    category: Optional[str] = None
    subject_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self, subject: Optional[Subject] = None) -> dict:
        return {
            "_id": self.task_id,
            "id": self.external_id,
            "userId": self.user_id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "status": self.status,
            "dueDate": self.due_date,
            "dueTime": self.due_time,
            "submissionLink": self.submission_link,
            "category": self.category,
            "subjectId": self.subject_id,
            "subject": (
                {"id": subject.external_id, "name": subject.name, "lecturer": list(subject.lecturer)}
                if subject
                else None
            ),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
