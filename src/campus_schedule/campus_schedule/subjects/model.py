from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class Reschedule:
    """One entry of a subject's append-only reschedule log."""

    subject_id: str
    original_date: str
    new_date: str
    reason: str
    start_time: str = ""
    end_time: str = ""
    room: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "subjectId": self.subject_id,
            "originalDate": self.original_date,
            "newDate": self.new_date,
            "reason": self.reason,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "room": self.room,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class Subject:
    """Domain entity: a course subject owned by one user.

    ``subject_id`` is the storage id, ``external_id`` the client-facing string
    ``id``; both address the same subject. ``meeting_dates`` is ``None`` for
    legacy subjects created before dates were precomputed.
    """

    subject_id: str
    external_id: str
    user_id: str
    name: str
    day: Optional[str] = None
    specific_date: Optional[str] = None
    room: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    lecturer: Tuple[str, ...] = ()
    meeting: int = 0
    start_date: Optional[str] = None
    meeting_dates: Optional[Tuple[str, ...]] = None
    attendance_dates: Tuple[str, ...] = ()
    reschedules: Tuple[Reschedule, ...] = field(default_factory=tuple)
    category: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def has_attended(self, on: str) -> bool:
        return on in self.attendance_dates

    def to_dict(self) -> dict:
        return {
            "_id": self.subject_id,
            "id": self.external_id,
            "userId": self.user_id,
            "name": self.name,
            "day": self.day,
            "specificDate": self.specific_date,
            "room": self.room,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "lecturer": list(self.lecturer),
            "meeting": self.meeting,
            "startDate": self.start_date,
            "meetingDates": list(self.meeting_dates) if self.meeting_dates is not None else None,
            "attendanceDates": list(self.attendance_dates),
            "reschedules": [r.to_dict() for r in self.reschedules],
            "category": self.category,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
