from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, NewAttendanceRecord


class AttendanceHistoryRepository(Protocol):
    def append(self, record: NewAttendanceRecord, *, created_at: datetime) -> AttendanceRecord:
        raise NotImplementedError

    def list_for_user(self, user_id: str, *, limit: int) -> Sequence[AttendanceRecord]:
        """Newest first."""
        raise NotImplementedError

    def find_in_window(
        self,
        *,
        user_id: str,
        start: datetime,
        end: datetime,
        subject_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records with ``start <= attendance_date < end``."""
        raise NotImplementedError
