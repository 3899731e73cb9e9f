from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Reschedule, Subject


class SubjectRepository(Protocol):
    """Storage interface for subjects.

    Every ``subject_key`` accepts either the storage id or the string ``id``.
    """

    def list_for_user(self, user_id: str) -> Sequence[Subject]:
        raise NotImplementedError

    def find_one_by_alternate_keys(self, subject_key: str, *, user_id: Optional[str] = None) -> Optional[Subject]:
        raise NotImplementedError

    def create_many(self, *, user_id: str, items: Sequence[Mapping[str, Any]], at: datetime) -> Sequence[Subject]:
        raise NotImplementedError

    def update_fields(
        self,
        subject_key: str,
        *,
        user_id: str,
        fields: Mapping[str, Any],
        at: datetime,
    ) -> Optional[Subject]:
        raise NotImplementedError

    def delete(self, subject_key: str, *, user_id: str) -> bool:
        raise NotImplementedError

    def delete_all_for_user(self, user_id: str) -> int:
        raise NotImplementedError

    def append_reschedule(self, subject_key: str, *, user_id: str, reschedule: Reschedule, at: datetime) -> bool:
        raise NotImplementedError

    def atomic_increment_and_set(
        self,
        subject_key: str,
        *,
        user_id: str,
        attendance_date: str,
        attended: bool,
        increment: int,
        min_meeting: Optional[int] = None,
        max_meeting: Optional[int] = None,
        guard_date: bool = True,
        at: datetime,
    ) -> Optional[Subject]:
        """Apply ``meeting += increment`` and add (``attended=True``) or pull
        (``attended=False``) ``attendance_date`` in one atomic document update.

        Matches only a subject where ``min_meeting <= meeting <= max_meeting``
        (a missing ``meeting`` counts as 0) and, when ``guard_date`` is set,
        where the date's membership is the opposite of ``attended``. Returns
        the updated subject, or ``None`` when nothing matched.
        """
        raise NotImplementedError

    def initialize_attendance_dates(self, user_id: Optional[str] = None) -> tuple[int, int]:
        """Backfill ``attendanceDates`` and ``meeting`` on legacy subjects.

        Limited to ``user_id``'s subjects when given. Returns (found, updated).
        """
        raise NotImplementedError
