from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from bson import ObjectId
from pymongo import ReturnDocument

from ..database.bootstrap import SUBJECTS
from ..database.connection import DatabaseConnection
from ..database.mongo_base import alternate_key_filter, scoped
from .model import Reschedule, Subject
from .repository import SubjectRepository


def _to_reschedule(doc: Mapping[str, Any]) -> Reschedule:
    return Reschedule(
        subject_id=str(doc.get("subjectId") or ""),
        original_date=doc.get("originalDate") or "",
        new_date=doc.get("newDate") or "",
        reason=doc.get("reason") or "",
        start_time=doc.get("startTime") or "",
        end_time=doc.get("endTime") or "",
        room=doc.get("room") or "",
        created_at=doc.get("createdAt"),
    )


def _to_subject(doc: Mapping[str, Any]) -> Subject:
    meeting_dates = doc.get("meetingDates")
    lecturer = doc.get("lecturer") or []
    if isinstance(lecturer, str):
        lecturer = [lecturer]
    return Subject(
        subject_id=str(doc["_id"]),
        external_id=str(doc.get("id") or doc["_id"]),
        user_id=str(doc.get("userId") or ""),
        name=doc.get("name") or "",
        day=doc.get("day"),
        specific_date=doc.get("specificDate"),
        room=doc.get("room"),
        start_time=doc.get("startTime"),
        end_time=doc.get("endTime"),
        lecturer=tuple(lecturer),
        meeting=int(doc.get("meeting") or 0),
        start_date=doc.get("startDate"),
        meeting_dates=tuple(meeting_dates) if meeting_dates is not None else None,
        attendance_dates=tuple(doc.get("attendanceDates") or ()),
        reschedules=tuple(_to_reschedule(r) for r in doc.get("reschedules") or ()),
        category=doc.get("category"),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


class MongoSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @property
    def _subjects(self):
        return self._conn_factory.db[SUBJECTS]

    def list_for_user(self, user_id: str) -> Sequence[Subject]:
        cursor = self._subjects.find({"userId": str(user_id)}).sort("createdAt", 1)
        return [_to_subject(d) for d in cursor]

    def find_one_by_alternate_keys(self, subject_key: str, *, user_id: Optional[str] = None) -> Optional[Subject]:
        doc = self._subjects.find_one(scoped(alternate_key_filter(subject_key), user_id=user_id))
        return _to_subject(doc) if doc else None

    def create_many(self, *, user_id: str, items: Sequence[Mapping[str, Any]], at: datetime) -> Sequence[Subject]:
        docs = []
        for item in items:
            oid = ObjectId()
            doc = dict(item)
            doc.update(
                {
                    "_id": oid,
                    "id": str(item.get("id") or oid),
                    "userId": str(user_id),
                    "meeting": 0,
                    "attendanceDates": [],
                    "reschedules": [],
                    "createdAt": at,
                    "updatedAt": at,
                }
            )
            docs.append(doc)
        if docs:
            self._subjects.insert_many(docs)
        return [_to_subject(d) for d in docs]

    def update_fields(
        self,
        subject_key: str,
        *,
        user_id: str,
        fields: Mapping[str, Any],
        at: datetime,
    ) -> Optional[Subject]:
        doc = self._subjects.find_one_and_update(
            scoped(alternate_key_filter(subject_key), user_id=user_id),
            {"$set": {**dict(fields), "updatedAt": at}},
            return_document=ReturnDocument.AFTER,
        )
        return _to_subject(doc) if doc else None

    def delete(self, subject_key: str, *, user_id: str) -> bool:
        result = self._subjects.delete_one(scoped(alternate_key_filter(subject_key), user_id=user_id))
        return result.deleted_count > 0

    def delete_all_for_user(self, user_id: str) -> int:
        return self._subjects.delete_many({"userId": str(user_id)}).deleted_count

    def append_reschedule(self, subject_key: str, *, user_id: str, reschedule: Reschedule, at: datetime) -> bool:
        entry = reschedule.to_dict()
        entry["createdAt"] = reschedule.created_at or at
        result = self._subjects.update_one(
            scoped(alternate_key_filter(subject_key), user_id=user_id),
            {"$push": {"reschedules": entry}, "$set": {"updatedAt": at}},
        )
        return result.matched_count > 0

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
        conditions: list[dict] = [alternate_key_filter(subject_key), {"userId": str(user_id)}]
        if guard_date:
            if attended:
                conditions.append({"attendanceDates": {"$ne": attendance_date}})
            else:
                conditions.append({"attendanceDates": attendance_date})

        bounds: dict = {}
        if min_meeting is not None:
            bounds["$gte"] = min_meeting
        if max_meeting is not None:
            bounds["$lte"] = max_meeting
        if bounds:
            clause: dict = {"meeting": bounds}
            # Legacy documents have no counter; $inc treats the missing field as 0.
            if (min_meeting is None or min_meeting <= 0) and (max_meeting is None or max_meeting >= 0):
                clause = {"$or": [clause, {"meeting": {"$exists": False}}]}
            conditions.append(clause)

        date_op = "$addToSet" if attended else "$pull"
        update = {
            "$inc": {"meeting": increment},
            date_op: {"attendanceDates": attendance_date},
            "$set": {"updatedAt": at},
        }
        doc = self._subjects.find_one_and_update(
            {"$and": conditions},
            update,
            return_document=ReturnDocument.AFTER,
        )
        return _to_subject(doc) if doc else None

    def initialize_attendance_dates(self, user_id: Optional[str] = None) -> tuple[int, int]:
        missing_dates = scoped({"attendanceDates": {"$exists": False}}, user_id=user_id)
        missing_meeting = scoped({"meeting": {"$exists": False}}, user_id=user_id)
        legacy = scoped(
            {"$or": [{"attendanceDates": {"$exists": False}}, {"meeting": {"$exists": False}}]},
            user_id=user_id,
        )
        found = self._subjects.count_documents(legacy)
        self._subjects.update_many(missing_dates, {"$set": {"attendanceDates": []}})
        self._subjects.update_many(missing_meeting, {"$set": {"meeting": 0}})
        return found, found - self._subjects.count_documents(legacy)
