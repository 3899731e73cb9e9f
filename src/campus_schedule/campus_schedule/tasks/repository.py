from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Task


class TaskRepository(Protocol):
    """Storage interface for tasks. Every lookup is scoped to the owner."""

    def list_for_user(self, user_id: str) -> Sequence[Task]:
        """Newest first."""
        raise NotImplementedError

    def find_one_by_alternate_keys(self, task_key: str, *, user_id: str) -> Optional[Task]:
        raise NotImplementedError

    def create(self, *, user_id: str, fields: Mapping[str, Any], at: datetime) -> Task:
        raise NotImplementedError

    def update_fields(self, task_key: str, *, user_id: str, fields: Mapping[str, Any], at: datetime) -> Optional[Task]:
        raise NotImplementedError

    def delete(self, task_key: str, *, user_id: str) -> bool:
        raise NotImplementedError
