from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_utc, parse_iso_date, today_in
from ..common.validators import require_non_empty
from ..core.constants import MAX_MEETINGS
from ..core.enums import SubjectCategory
from ..core.exceptions import ForbiddenError, NotFoundError, ValidationError
from .meeting_calculator import calculate_meeting_dates, get_meeting_stats, get_next_meeting
from .model import Reschedule, Subject
from .repository import SubjectRepository

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("name", "day", "specificDate", "room", "startTime", "endTime", "startDate")
_DATE_FIELDS = ("specificDate", "startDate")


def _clean_text(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string", field=key)
    return value.strip() or None


def _clean_lecturer(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValidationError("lecturer must be a list of names", field="lecturer")
    return [v.strip() for v in value if v.strip()]


def resolve_owned_subject(subjects: SubjectRepository, subject_key: str, user_id: str) -> Subject:
    """Resolve a subject by either key and check ownership."""
    subject = subjects.find_one_by_alternate_keys(subject_key)
    if not subject:
        raise NotFoundError("Subject not found")
    if subject.user_id != str(user_id):
        raise ForbiddenError("You do not have access to this subject")
    return subject


class SubjectService:
    """Use cases: subject management scoped to the owning user."""

    def __init__(
        self,
        subjects: SubjectRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
        timezone_name: str = "UTC",
    ):
        self._subjects = subjects
        self._clock = clock
        self._tz = timezone_name

    def get_owned(self, subject_key: str, user_id: str) -> Subject:
        return resolve_owned_subject(self._subjects, subject_key, user_id)

    def list_for_user(self, user_id: str) -> Sequence[Subject]:
        return self._subjects.list_for_user(user_id)

    def _normalize(self, data: Mapping[str, Any], *, partial: bool) -> dict:
        if not isinstance(data, Mapping):
            raise ValidationError("Subject payload must be an object")

        out: dict = {}
        for key in _TEXT_FIELDS:
            if key in data:
                out[key] = _clean_text(data, key)
        for key in _DATE_FIELDS:
            if out.get(key):
                parse_iso_date(out[key])

        if "lecturer" in data:
            out["lecturer"] = _clean_lecturer(data.get("lecturer"))

        if "category" in data:
            category = data.get("category")
            if category is not None:
                try:
                    category = SubjectCategory(category).value
                except ValueError:
                    raise ValidationError("category must be High, Medium or Low", field="category")
            out["category"] = category

        if "meetingDates" in data and data.get("meetingDates") is not None:
            dates = data["meetingDates"]
            if not isinstance(dates, (list, tuple)) or len(dates) > MAX_MEETINGS:
                raise ValidationError(f"meetingDates must be a list of at most {MAX_MEETINGS} dates", field="meetingDates")
            out["meetingDates"] = sorted({parse_iso_date(d).isoformat() for d in dates})

        if not partial:
            out["name"] = require_non_empty(out.get("name") or "", "name")
            if not out.get("day") and not out.get("specificDate"):
                raise ValidationError("Either day or specificDate is required", field="day")
        elif "name" in out and not out["name"]:
            raise ValidationError("name is required", field="name")

        if "meetingDates" not in out and out.get("startDate") and out.get("day") and not out.get("specificDate"):
            out["meetingDates"] = calculate_meeting_dates(out["startDate"], out["day"])
        return out

    def create(self, user_id: str, data: Mapping[str, Any]) -> Subject:
        return self.create_many(user_id, [data])[0]

    def create_many(self, user_id: str, items: Sequence[Mapping[str, Any]]) -> Sequence[Subject]:
        if not items:
            raise ValidationError("No subjects to add")
        prepared = []
        for item in items:
            doc = self._normalize(item, partial=False)
            external_id = item.get("id") if isinstance(item, Mapping) else None
            if external_id:
                doc["id"] = str(external_id)
            prepared.append(doc)

        created = self._subjects.create_many(user_id=user_id, items=prepared, at=self._clock())
        logger.info("created %s subject(s) for user %s", len(created), user_id)
        return created

    def update(self, subject_key: str, user_id: str, data: Mapping[str, Any]) -> Subject:
        fields = self._normalize(data, partial=True)
        if not fields:
            raise ValidationError("Nothing to update")
        subject = self.get_owned(subject_key, user_id)
        updated = self._subjects.update_fields(subject.subject_id, user_id=user_id, fields=fields, at=self._clock())
        if not updated:
            raise NotFoundError("Subject not found")
        return updated

    def delete(self, subject_key: str, user_id: str) -> None:
        subject = self.get_owned(subject_key, user_id)
        if not self._subjects.delete(subject.subject_id, user_id=user_id):
            raise NotFoundError("Subject not found")

    def delete_all(self, user_id: str) -> int:
        count = self._subjects.delete_all_for_user(user_id)
        logger.info("deleted %s subject(s) for user %s", count, user_id)
        return count

    def add_reschedule(self, subject_key: str, user_id: str, data: Mapping[str, Any]) -> Reschedule:
        original_date = _clean_text(data, "originalDate")
        new_date = _clean_text(data, "newDate")
        if not original_date or not new_date:
            raise ValidationError("Original date and new date are required")
        parse_iso_date(original_date)
        parse_iso_date(new_date)

        subject = self.get_owned(subject_key, user_id)
        now = self._clock()
        reschedule = Reschedule(
            subject_id=subject.external_id,
            original_date=original_date,
            new_date=new_date,
            reason=_clean_text(data, "reason") or "Reschedule",
            start_time=_clean_text(data, "startTime") or "",
            end_time=_clean_text(data, "endTime") or "",
            room=_clean_text(data, "room") or "",
            created_at=now,
        )
        if not self._subjects.append_reschedule(subject.subject_id, user_id=user_id, reschedule=reschedule, at=now):
            raise NotFoundError("Subject not found")
        logger.info("reschedule added for subject %s: %s -> %s", subject.external_id, original_date, new_date)
        return reschedule

    def initialize_attendance_dates(self, user_id: Optional[str] = None) -> dict:
        """Backfill legacy subjects, only the caller's when ``user_id`` is given."""
        found, updated = self._subjects.initialize_attendance_dates(user_id)
        logger.info("initialised %s of %s legacy subject(s)", updated, found)
        return {"foundSubjects": found, "updatedSubjects": updated}

    def meeting_overview(self, subject: Subject) -> Optional[dict]:
        """Progress through the semester for weekly subjects, ``None`` otherwise."""
        if not subject.meeting_dates:
            return None
        today = today_in(self._tz, now=self._clock())
        stats = get_meeting_stats(subject.meeting_dates, subject.attendance_dates, today)
        stats["nextMeeting"] = get_next_meeting(subject.meeting_dates, today)
        return stats
