from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from pymongo import DESCENDING

from ..database.bootstrap import ATTENDANCE_HISTORY
from ..database.connection import DatabaseConnection
from .model import AttendanceRecord, NewAttendanceRecord
from .repository import AttendanceHistoryRepository


def _to_record(doc: Mapping[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=str(doc["_id"]),
        user_id=str(doc.get("userId") or ""),
        subject_id=str(doc.get("subjectId") or ""),
        subject_name=doc.get("subjectName") or "",
        attendance_date=doc["attendanceDate"],
        location=doc.get("location"),
        notes=doc.get("notes"),
        code=doc.get("code"),
        created_at=doc.get("createdAt"),
    )


class MongoAttendanceHistoryRepository(AttendanceHistoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @property
    def _history(self):
        return self._conn_factory.db[ATTENDANCE_HISTORY]

    def append(self, record: NewAttendanceRecord, *, created_at: datetime) -> AttendanceRecord:
        doc = {
            "userId": record.user_id,
            "subjectId": record.subject_id,
            "subjectName": record.subject_name,
            "attendanceDate": record.attendance_date,
            "location": record.location,
            "notes": record.notes,
            "code": record.code,
            "createdAt": created_at,
        }
        result = self._history.insert_one(doc)
        doc["_id"] = result.inserted_id
        return _to_record(doc)

    def list_for_user(self, user_id: str, *, limit: int) -> Sequence[AttendanceRecord]:
        cursor = self._history.find({"userId": str(user_id)}).sort("attendanceDate", DESCENDING).limit(int(limit))
        return [_to_record(d) for d in cursor]

    def find_in_window(
        self,
        *,
        user_id: str,
        start: datetime,
        end: datetime,
        subject_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        query: dict = {"userId": str(user_id), "attendanceDate": {"$gte": start, "$lt": end}}
        if subject_id:
            query["subjectId"] = str(subject_id)
        return [_to_record(d) for d in self._history.find(query)]
