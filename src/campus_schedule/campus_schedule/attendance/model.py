from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceAction


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one append-only attendance history entry."""

    record_id: str
    user_id: str
    subject_id: str
    subject_name: str
    attendance_date: datetime
    location: Optional[str] = None
    notes: Optional[str] = None
    code: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "subjectId": self.subject_id,
            "subjectName": self.subject_name,
            "attendanceDate": self.attendance_date.isoformat(),
            "location": self.location,
            "notes": self.notes,
            "code": self.code,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class NewAttendanceRecord:
    user_id: str
    subject_id: str
    subject_name: str
    attendance_date: datetime
    location: Optional[str] = None
    notes: Optional[str] = None
    code: Optional[str] = None


@dataclass(frozen=True)
class LedgerResult:
    """Meeting count after a ledger mutation."""

    subject_id: str
    action: AttendanceAction
    meeting: int
    attendance_date: str
    changed: bool

    def to_dict(self) -> dict:
        return {
            "meeting": self.meeting,
            "subjectId": self.subject_id,
            "action": self.action.value,
            "attendanceDate": self.attendance_date,
            "changed": self.changed,
        }


@dataclass(frozen=True)
class CheckInResult:
    ledger: LedgerResult
    record: Optional[AttendanceRecord]

    @property
    def already_recorded(self) -> bool:
        return self.record is None

    def to_dict(self) -> dict:
        data = self.ledger.to_dict()
        data["alreadyRecorded"] = self.already_recorded
        data["record"] = self.record.to_dict() if self.record else None
        return data
