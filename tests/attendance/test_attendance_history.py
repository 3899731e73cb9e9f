from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.campus_schedule.campus_schedule.attendance.model import NewAttendanceRecord
from src.campus_schedule.campus_schedule.attendance.service import AttendanceHistoryService
from src.campus_schedule.campus_schedule.core.exceptions import ForbiddenError, ValidationError
from tests.fakes import FakeClock, InMemoryHistory, InMemorySubjects


def _make_service(timezone_name: str = "UTC"):
    subjects = InMemorySubjects()
    history = InMemoryHistory()
    subjects.add(subject_id="s-algo", user_id="u1", name="Algoritma")
    subjects.add(subject_id="s-basdat", user_id="u1", name="Basis Data")
    subjects.add(subject_id="s-other", user_id="u2", name="Other")
    svc = AttendanceHistoryService(history, subjects, clock=FakeClock(), timezone_name=timezone_name)
    return svc, history


def _put(history: InMemoryHistory, subject_id: str, at: datetime, user_id: str = "u1"):
    history.append(
        NewAttendanceRecord(user_id=user_id, subject_id=subject_id, subject_name=subject_id, attendance_date=at),
        created_at=at,
    )


def test_status_window_covers_the_utc_day_only():
    svc, history = _make_service()
    day_start = datetime(2025, 3, 10, tzinfo=timezone.utc)
    _put(history, "s-algo", day_start)
    _put(history, "s-basdat", day_start + timedelta(hours=23, minutes=59, seconds=59, milliseconds=998))
    _put(history, "s-algo", day_start + timedelta(hours=23, minutes=59, seconds=59, milliseconds=999))
    _put(history, "s-algo", day_start - timedelta(milliseconds=1))

    result = svc.attendance_status("u1", day="2025-03-10")

    assert result["attendanceStatus"] == {"s-algo": True, "s-basdat": True}
    assert len(result["records"]) == 2


def test_status_for_one_subject():
    svc, history = _make_service()
    _put(history, "s-algo", datetime(2025, 3, 10, 8, tzinfo=timezone.utc))

    hit = svc.attendance_status("u1", day="2025-03-10", subject_id="s-algo")
    miss = svc.attendance_status("u1", day="2025-03-10", subject_id="s-basdat")

    assert hit["hasAttended"] is True
    assert hit["attendanceRecord"]["subjectId"] == "s-algo"
    assert miss == {"hasAttended": False, "attendanceRecord": None}


def test_status_is_scoped_to_the_caller():
    svc, history = _make_service()
    _put(history, "s-other", datetime(2025, 3, 10, 8, tzinfo=timezone.utc), user_id="u2")

    assert svc.attendance_status("u1", day="2025-03-10")["attendanceStatus"] == {}


def test_status_window_follows_configured_timezone():
    svc, history = _make_service("Asia/Jakarta")
    # 2025-03-10 06:00 in Jakarta (UTC+7) is still 2025-03-09 in UTC
    _put(history, "s-algo", datetime(2025, 3, 9, 23, tzinfo=timezone.utc))

    assert svc.attendance_status("u1", day="2025-03-10", subject_id="s-algo")["hasAttended"] is True


def test_status_requires_a_valid_date():
    svc, _ = _make_service()

    with pytest.raises(ValidationError):
        svc.attendance_status("u1", day="")
    with pytest.raises(ValidationError):
        svc.attendance_status("u1", day="2025-13-40")


def test_history_is_newest_first_and_grouped_by_day():
    svc, history = _make_service()
    _put(history, "s-algo", datetime(2025, 3, 3, 8, tzinfo=timezone.utc))
    _put(history, "s-basdat", datetime(2025, 3, 10, 13, tzinfo=timezone.utc))
    _put(history, "s-algo", datetime(2025, 3, 10, 8, tzinfo=timezone.utc))

    result = svc.list_history("u1")

    assert [r["subjectId"] for r in result["records"]] == ["s-basdat", "s-algo", "s-algo"]
    assert [g["date"] for g in result["grouped"]] == ["2025-03-10", "2025-03-03"]
    assert len(result["grouped"][0]["records"]) == 2


def test_append_record_checks_ownership_and_code():
    svc, history = _make_service()

    record = svc.append("u1", {"subjectId": "s-algo", "attendanceDate": "2025-03-10T08:00:00Z", "code": "ABCDEF123456"})
    assert record.subject_name == "Algoritma"
    assert record.code == "abcdef123456"
    assert record.attendance_date == datetime(2025, 3, 10, 8, tzinfo=timezone.utc)

    with pytest.raises(ForbiddenError):
        svc.append("u1", {"subjectId": "s-other"})
    with pytest.raises(ValidationError):
        svc.append("u1", {"subjectId": "s-algo", "code": "nope"})
    with pytest.raises(ValidationError):
        svc.append("u1", {})
    assert len(history.records) == 1


def test_status_for_one_subject_accepts_either_key():
    subjects = InMemorySubjects()
    history = InMemoryHistory()
    subjects.add(subject_id="0123456789abcdef01234567", external_id="subj-web", user_id="u1", name="Web")
    svc = AttendanceHistoryService(history, subjects, clock=FakeClock())
    _put(history, "subj-web", datetime(2025, 3, 10, 8, tzinfo=timezone.utc))

    by_storage_id = svc.attendance_status("u1", day="2025-03-10", subject_id="0123456789abcdef01234567")
    by_string_id = svc.attendance_status("u1", day="2025-03-10", subject_id="subj-web")

    assert by_storage_id["hasAttended"] is True
    assert by_string_id["hasAttended"] is True


def test_status_for_someone_elses_subject_is_forbidden():
    svc, _ = _make_service()

    with pytest.raises(ForbiddenError):
        svc.attendance_status("u1", day="2025-03-10", subject_id="s-other")
