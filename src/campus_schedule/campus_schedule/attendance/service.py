from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ..common.datetime_utils import (
    day_window,
    format_iso_date,
    get_zone,
    now_utc,
    parse_iso_date,
    parse_iso_datetime,
    today_in,
)
from ..core.constants import DEFAULT_HISTORY_LIMIT, MAX_MEETINGS
from ..core.enums import AttendanceAction
from ..core.exceptions import NotFoundError, ValidationError
from ..subjects.model import Subject
from ..subjects.repository import SubjectRepository
from ..subjects.service import resolve_owned_subject
from .calculator.base import MeetingPolicy
from .calculator.percentage import compute_attendance_percentage
from .calculator.standard_policy import StandardMeetingPolicy
from .model import AttendanceRecord, CheckInResult, LedgerResult, NewAttendanceRecord
from .qr import CODE_RE
from .repository import AttendanceHistoryRepository

logger = logging.getLogger(__name__)


def parse_action(value: Any) -> AttendanceAction:
    if value is None or value == "":
        return AttendanceAction.ADD
    if isinstance(value, AttendanceAction):
        return value
    try:
        return AttendanceAction(str(value).lower())
    except ValueError:
        raise ValidationError("action must be 'add' or 'remove'", field="action")


def _optional_text(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string", field=key)
    return value.strip() or None


class AttendanceLedger:
    """Meeting counter and attendance-date set per subject.

    Every mutation is one conditional atomic update on the subject, so
    concurrent scans cannot double count a date or push ``meeting`` out of
    ``[0, MAX_MEETINGS]``.
    """

    def __init__(
        self,
        subjects: SubjectRepository,
        history: AttendanceHistoryRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
        timezone_name: str = "UTC",
        policy: Optional[MeetingPolicy] = None,
    ):
        self._subjects = subjects
        self._history = history
        self._clock = clock
        self._tz = timezone_name
        self._policy = policy or StandardMeetingPolicy()

    def _resolve_date(self, value: Optional[str]) -> str:
        if value:
            return format_iso_date(parse_iso_date(value))
        return today_in(self._tz, now=self._clock())

    def record_attendance(
        self,
        subject_key: str,
        user_id: str,
        *,
        attendance_date: Optional[str] = None,
        action: Any = AttendanceAction.ADD,
    ) -> LedgerResult:
        action = parse_action(action)
        day = self._resolve_date(attendance_date)
        subject = resolve_owned_subject(self._subjects, subject_key, user_id)

        if action == AttendanceAction.ADD:
            updated = self._subjects.atomic_increment_and_set(
                subject.subject_id,
                user_id=user_id,
                attendance_date=day,
                attended=True,
                increment=1,
                max_meeting=MAX_MEETINGS - 1,
                at=self._clock(),
            )
        else:
            # Decrement whenever the counter is above zero, pulling the date if present.
            updated = self._subjects.atomic_increment_and_set(
                subject.subject_id,
                user_id=user_id,
                attendance_date=day,
                attended=False,
                increment=-1,
                min_meeting=1,
                guard_date=False,
                at=self._clock(),
            )
            if updated is None:
                # Date recorded while the counter already sits at 0: drop the date only.
                updated = self._subjects.atomic_increment_and_set(
                    subject.subject_id,
                    user_id=user_id,
                    attendance_date=day,
                    attended=False,
                    increment=0,
                    at=self._clock(),
                )

        if updated is not None:
            logger.info(
                "attendance %s for subject %s on %s, meeting count: %s",
                "recorded" if action == AttendanceAction.ADD else "removed",
                subject.external_id,
                day,
                updated.meeting,
            )
            return LedgerResult(
                subject_id=subject_key,
                action=action,
                meeting=updated.meeting,
                attendance_date=day,
                changed=True,
            )

        current = self._subjects.find_one_by_alternate_keys(subject.subject_id, user_id=user_id)
        if current is None:
            raise NotFoundError("Subject not found")
        if action == AttendanceAction.ADD and not current.has_attended(day):
            raise ValidationError(f"All {MAX_MEETINGS} meetings are already recorded for this subject")

        return LedgerResult(
            subject_id=subject_key,
            action=action,
            meeting=current.meeting,
            attendance_date=day,
            changed=False,
        )

    def _attendance_timestamp(self, explicit_date: Optional[str]) -> datetime:
        if explicit_date:
            start, _ = day_window(parse_iso_date(explicit_date), self._tz)
            return start
        return self._clock()

    def check_in(
        self,
        subject_key: str,
        user_id: str,
        *,
        attendance_date: Optional[str] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        code: Optional[str] = None,
    ) -> CheckInResult:
        """Record attendance and append the matching history entry as one event.

        If the history write fails the counter update is reverted and the
        error propagates. Re-scanning an already recorded date appends nothing.
        """
        ledger = self.record_attendance(subject_key, user_id, attendance_date=attendance_date)
        if not ledger.changed:
            return CheckInResult(ledger=ledger, record=None)

        subject = resolve_owned_subject(self._subjects, subject_key, user_id)
        default_notes = f"{'Reschedule' if attendance_date else 'Regular'} class - Attendance {ledger.meeting}/{MAX_MEETINGS}"
        new_record = NewAttendanceRecord(
            user_id=str(user_id),
            subject_id=subject.external_id,
            subject_name=subject.name,
            attendance_date=self._attendance_timestamp(attendance_date),
            location=location if location is not None else subject.room,
            notes=notes or default_notes,
            code=code,
        )
        try:
            record = self._history.append(new_record, created_at=self._clock())
        except Exception:
            logger.error("history write failed for subject %s; reverting meeting count", subject.external_id)
            try:
                self._subjects.atomic_increment_and_set(
                    subject.subject_id,
                    user_id=user_id,
                    attendance_date=ledger.attendance_date,
                    attended=False,
                    increment=-1,
                    min_meeting=1,
                    at=self._clock(),
                )
            except Exception:
                logger.exception("could not revert meeting count for subject %s", subject.external_id)
            raise

        return CheckInResult(ledger=ledger, record=record)

    def summary(self, user_id: str) -> dict:
        subjects = self._subjects.list_for_user(user_id)
        return {
            "percentage": compute_attendance_percentage(subjects, self._policy),
            "attendedMeetings": sum(len(s.attendance_dates) for s in subjects),
            "possibleMeetings": sum(self._policy.possible_meetings(s) for s in subjects),
            "subjects": [self._subject_summary(s) for s in subjects],
        }

    def _subject_summary(self, subject: Subject) -> dict:
        return {
            "id": subject.external_id,
            "name": subject.name,
            "meeting": subject.meeting,
            "attended": len(subject.attendance_dates),
            "possible": self._policy.possible_meetings(subject),
            "percentage": compute_attendance_percentage([subject], self._policy),
        }


class AttendanceHistoryService:
    """Use cases: append-only attendance log and per-day status."""

    def __init__(
        self,
        history: AttendanceHistoryRepository,
        subjects: SubjectRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
        timezone_name: str = "UTC",
    ):
        self._history = history
        self._subjects = subjects
        self._clock = clock
        self._tz = timezone_name

    def list_history(self, user_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> dict:
        records = self._history.list_for_user(user_id, limit=max(1, int(limit)))
        zone = get_zone(self._tz)
        grouped: dict[str, list[dict]] = {}
        for r in records:
            key = format_iso_date(r.attendance_date.astimezone(zone).date())
            grouped.setdefault(key, []).append(r.to_dict())
        return {
            "records": [r.to_dict() for r in records],
            "grouped": [{"date": d, "records": items} for d, items in grouped.items()],
        }

    def append(self, user_id: str, data: Mapping[str, Any]) -> AttendanceRecord:
        subject_key = _optional_text(data, "subjectId")
        if not subject_key:
            raise ValidationError("subjectId is required", field="subjectId")
        subject = resolve_owned_subject(self._subjects, subject_key, user_id)

        raw_date = data.get("attendanceDate")
        attendance_date = parse_iso_datetime(raw_date) if raw_date else self._clock()

        code = _optional_text(data, "code")
        if code and not CODE_RE.match(code):
            raise ValidationError("Invalid code format", field="code")

        record = NewAttendanceRecord(
            user_id=str(user_id),
            subject_id=subject.external_id,
            subject_name=_optional_text(data, "subjectName") or subject.name,
            attendance_date=attendance_date,
            location=_optional_text(data, "location"),
            notes=_optional_text(data, "notes"),
            code=code.lower() if code else None,
        )
        return self._history.append(record, created_at=self._clock())

    def attendance_status(self, user_id: str, *, day: str, subject_id: Optional[str] = None) -> dict:
        """Attendance on one calendar day.

        The window is [day 00:00:00.000, day 23:59:59.999) in the configured
        timezone (UTC unless ATTENDANCE_TIMEZONE says otherwise).
        """
        if not day:
            raise ValidationError("Date parameter is required", field="date")
        start, end = day_window(parse_iso_date(day), self._tz)
        # History rows carry the subject's string id, whichever key the caller used.
        external_id = resolve_owned_subject(self._subjects, subject_id, user_id).external_id if subject_id else None
        records = self._history.find_in_window(user_id=user_id, start=start, end=end, subject_id=external_id)

        if subject_id:
            return {
                "hasAttended": bool(records),
                "attendanceRecord": records[0].to_dict() if records else None,
            }

        status: dict[str, bool] = {}
        for r in records:
            status[r.subject_id] = True
        return {"attendanceStatus": status, "records": [r.to_dict() for r in records]}
