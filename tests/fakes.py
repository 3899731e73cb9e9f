"""In-memory repositories implementing the storage Protocols, for tests."""
from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from src.campus_schedule.campus_schedule.attendance.model import AttendanceRecord, NewAttendanceRecord
from src.campus_schedule.campus_schedule.core.exceptions import ConflictError
from src.campus_schedule.campus_schedule.settings.model import UserSettings
from src.campus_schedule.campus_schedule.subjects.model import Reschedule, Subject
from src.campus_schedule.campus_schedule.tasks.model import Task
from src.campus_schedule.campus_schedule.users.model import User


class FakeClock:
    def __init__(self, now: datetime = datetime(2025, 3, 10, 9, 30, tzinfo=timezone.utc)):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class InMemoryUsers:
    def __init__(self):
        self.users: dict[str, User] = {}
        self.fail_on_clear = False

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(str(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def get_by_nim(self, nim: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.nim == nim), None)

    def get_by_remember_token(self, token_hash: str, *, now: datetime) -> Optional[User]:
        for u in self.users.values():
            if u.remember_token_hash == token_hash and u.remember_token_expires and u.remember_token_expires > now:
                return u
        return None

    def create_user(self, *, user_id, name, email, password_hash, email_verification_token, created_at) -> User:
        if self.get_by_email(email):
            raise ConflictError("An account with this email already exists", field="email")
        user = User(
            user_id=user_id,
            name=name,
            email=email,
            password_hash=password_hash,
            created_at=created_at,
            updated_at=created_at,
        )
        self.users[user_id] = user
        return user

    def record_login(self, user_id, *, at, remember_token_hash=None, remember_token_expires=None) -> bool:
        user = self.users.get(user_id)
        if not user:
            return False
        self.users[user_id] = replace(
            user,
            last_login_at=at,
            remember_token_hash=remember_token_hash,
            remember_token_expires=remember_token_expires if remember_token_hash else None,
            updated_at=at,
        )
        return True

    def clear_remember_token(self, user_id: str) -> bool:
        if self.fail_on_clear:
            raise RuntimeError("storage unavailable")
        user = self.users.get(user_id)
        if not user:
            return False
        self.users[user_id] = replace(user, remember_token_hash=None, remember_token_expires=None)
        return True

    def clear_remember_token_by_hash(self, token_hash: str) -> bool:
        if self.fail_on_clear:
            raise RuntimeError("storage unavailable")
        for uid, u in list(self.users.items()):
            if u.remember_token_hash == token_hash:
                self.users[uid] = replace(u, remember_token_hash=None, remember_token_expires=None)
                return True
        return False

    def update_password(self, user_id: str, *, password_hash: str, at: datetime) -> bool:
        user = self.users.get(user_id)
        if not user:
            return False
        self.users[user_id] = replace(user, password_hash=password_hash, updated_at=at)
        return True

    def update_profile(self, user_id: str, *, fields: Mapping[str, Any], at: datetime) -> Optional[User]:
        user = self.users.get(user_id)
        if not user:
            return None
        mapping = {"profileImage": "profile_image"}
        changes = {mapping.get(k, k): v for k, v in fields.items()}
        self.users[user_id] = replace(user, updated_at=at, **changes)
        return self.users[user_id]


class InMemorySubjects:
    def __init__(self):
        self.subjects: dict[str, Subject] = {}
        self.initialized_for: list[Optional[str]] = []
        self._ids = itertools.count(1)

    def _find(self, key: str) -> Optional[Subject]:
        for s in self.subjects.values():
            if key in (s.subject_id, s.external_id):
                return s
        return None

    def add(self, **kwargs) -> Subject:
        """Insert a subject directly, bypassing validation."""
        sid = kwargs.pop("subject_id", None) or f"{next(self._ids):024x}"
        kwargs.setdefault("external_id", sid)
        subject = Subject(subject_id=sid, **kwargs)
        self.subjects[sid] = subject
        return subject

    def list_for_user(self, user_id: str) -> Sequence[Subject]:
        return [s for s in self.subjects.values() if s.user_id == str(user_id)]

    def find_one_by_alternate_keys(self, subject_key: str, *, user_id: Optional[str] = None) -> Optional[Subject]:
        s = self._find(subject_key)
        if s is None or (user_id is not None and s.user_id != str(user_id)):
            return None
        return s

    def create_many(self, *, user_id: str, items: Sequence[Mapping[str, Any]], at: datetime) -> Sequence[Subject]:
        created = []
        for item in items:
            sid = f"{next(self._ids):024x}"
            meeting_dates = item.get("meetingDates")
            created.append(
                self.add(
                    subject_id=sid,
                    external_id=str(item.get("id") or sid),
                    user_id=str(user_id),
                    name=item.get("name"),
                    day=item.get("day"),
                    specific_date=item.get("specificDate"),
                    room=item.get("room"),
                    start_time=item.get("startTime"),
                    end_time=item.get("endTime"),
                    lecturer=tuple(item.get("lecturer") or ()),
                    start_date=item.get("startDate"),
                    meeting_dates=tuple(meeting_dates) if meeting_dates is not None else None,
                    category=item.get("category"),
                    created_at=at,
                    updated_at=at,
                )
            )
        return created

    def update_fields(self, subject_key, *, user_id, fields, at) -> Optional[Subject]:
        s = self.find_one_by_alternate_keys(subject_key, user_id=user_id)
        if s is None:
            return None
        mapping = {
            "specificDate": "specific_date",
            "startTime": "start_time",
            "endTime": "end_time",
            "startDate": "start_date",
            "meetingDates": "meeting_dates",
        }
        changes = {}
        for k, v in fields.items():
            attr = mapping.get(k, k)
            if attr in ("meeting_dates", "lecturer") and v is not None:
                v = tuple(v)
            changes[attr] = v
        updated = replace(s, updated_at=at, **changes)
        self.subjects[s.subject_id] = updated
        return updated

    def delete(self, subject_key: str, *, user_id: str) -> bool:
        s = self.find_one_by_alternate_keys(subject_key, user_id=user_id)
        if s is None:
            return False
        del self.subjects[s.subject_id]
        return True

    def delete_all_for_user(self, user_id: str) -> int:
        doomed = [sid for sid, s in self.subjects.items() if s.user_id == str(user_id)]
        for sid in doomed:
            del self.subjects[sid]
        return len(doomed)

    def append_reschedule(self, subject_key, *, user_id, reschedule: Reschedule, at) -> bool:
        s = self.find_one_by_alternate_keys(subject_key, user_id=user_id)
        if s is None:
            return False
        self.subjects[s.subject_id] = replace(s, reschedules=s.reschedules + (reschedule,), updated_at=at)
        return True

    def atomic_increment_and_set(
        self,
        subject_key,
        *,
        user_id,
        attendance_date,
        attended,
        increment,
        min_meeting=None,
        max_meeting=None,
        guard_date=True,
        at,
    ) -> Optional[Subject]:
        s = self.find_one_by_alternate_keys(subject_key, user_id=user_id)
        if s is None:
            return None
        present = attendance_date in s.attendance_dates
        if guard_date and present == attended:
            return None
        if min_meeting is not None and s.meeting < min_meeting:
            return None
        if max_meeting is not None and s.meeting > max_meeting:
            return None

        if attended and not present:
            dates = s.attendance_dates + (attendance_date,)
        elif attended:
            dates = s.attendance_dates
        else:
            dates = tuple(d for d in s.attendance_dates if d != attendance_date)
        updated = replace(s, meeting=s.meeting + increment, attendance_dates=dates, updated_at=at)
        self.subjects[s.subject_id] = updated
        return updated

    def initialize_attendance_dates(self, user_id=None) -> tuple[int, int]:
        self.initialized_for.append(user_id)
        return 0, 0


class InMemoryHistory:
    def __init__(self):
        self.records: list[AttendanceRecord] = []
        self.fail_next_append = False
        self._ids = itertools.count(1)

    def append(self, record: NewAttendanceRecord, *, created_at: datetime) -> AttendanceRecord:
        if self.fail_next_append:
            self.fail_next_append = False
            raise RuntimeError("history insert failed")
        stored = AttendanceRecord(
            record_id=str(next(self._ids)),
            user_id=record.user_id,
            subject_id=record.subject_id,
            subject_name=record.subject_name,
            attendance_date=record.attendance_date,
            location=record.location,
            notes=record.notes,
            code=record.code,
            created_at=created_at,
        )
        self.records.append(stored)
        return stored

    def list_for_user(self, user_id: str, *, limit: int) -> Sequence[AttendanceRecord]:
        mine = [r for r in self.records if r.user_id == str(user_id)]
        mine.sort(key=lambda r: r.attendance_date, reverse=True)
        return mine[:limit]

    def find_in_window(self, *, user_id, start, end, subject_id=None) -> Sequence[AttendanceRecord]:
        return [
            r
            for r in self.records
            if r.user_id == str(user_id)
            and start <= r.attendance_date < end
            and (subject_id is None or r.subject_id == subject_id)
        ]


class InMemorySettings:
    def __init__(self):
        self.settings: dict[str, UserSettings] = {}

    def get(self, user_id: str) -> Optional[UserSettings]:
        return self.settings.get(str(user_id))

    def upsert(self, user_id: str, *, fields, defaults, at) -> UserSettings:
        current = self.settings.get(str(user_id))
        if current is None:
            current = replace(UserSettings(user_id=str(user_id), created_at=at), **defaults)
        saved = replace(current, updated_at=at, **fields)
        self.settings[str(user_id)] = saved
        return saved


class InMemoryTasks:
    _FIELDS = {
        "title": "title",
        "description": "description",
        "priority": "priority",
        "status": "status",
        "dueDate": "due_date",
        "dueTime": "due_time",
        "submissionLink": "submission_link",
        "category": "category",
        "subjectId": "subject_id",
    }

    def __init__(self):
        self.tasks: dict[str, Task] = {}
        self._ids = itertools.count(1)

    def _attrs(self, fields: Mapping[str, Any]) -> dict:
        return {self._FIELDS[k]: v for k, v in fields.items()}

    def list_for_user(self, user_id: str) -> Sequence[Task]:
        mine = [t for t in self.tasks.values() if t.user_id == str(user_id)]
        return sorted(mine, key=lambda t: t.created_at, reverse=True)

    def find_one_by_alternate_keys(self, task_key: str, *, user_id: str) -> Optional[Task]:
        for t in self.tasks.values():
            if task_key in (t.task_id, t.external_id) and t.user_id == str(user_id):
                return t
        return None

    def create(self, *, user_id: str, fields: Mapping[str, Any], at: datetime) -> Task:
        tid = f"{next(self._ids):024x}"
        attrs = self._attrs(fields)
        task = Task(
            task_id=tid,
            external_id=tid,
            user_id=str(user_id),
            title=attrs.pop("title"),
            due_date=attrs.pop("due_date"),
            created_at=at,
            updated_at=at,
            **attrs,
        )
        self.tasks[tid] = task
        return task

    def update_fields(self, task_key: str, *, user_id: str, fields: Mapping[str, Any], at: datetime) -> Optional[Task]:
        t = self.find_one_by_alternate_keys(task_key, user_id=user_id)
        if t is None:
            return None
        updated = replace(t, updated_at=at, **self._attrs(fields))
        self.tasks[t.task_id] = updated
        return updated

    def delete(self, task_key: str, *, user_id: str) -> bool:
        t = self.find_one_by_alternate_keys(task_key, user_id=user_id)
        if t is None:
            return False
        del self.tasks[t.task_id]
        return True
