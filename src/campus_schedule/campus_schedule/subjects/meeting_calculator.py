"""Meeting-date helpers for weekly subjects.

A semester has 14 weekly meetings (7 before and 7 after the midterm). Dates
are ``YYYY-MM-DD`` strings throughout, so plain string comparison orders them.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import format_iso_date, parse_iso_date, today_utc
from ..common.math_utils import round_half_up
from ..core.constants import MAX_MEETINGS
from ..core.exceptions import ValidationError

# Python weekday(): Monday=0 .. Sunday=6
DAY_INDEX = {
    "Senin": 0,
    "Selasa": 1,
    "Rabu": 2,
    "Kamis": 3,
    "Jumat": 4,
    "Sabtu": 5,
    "Minggu": 6,
    "Monday": 0,
    "Tuesday": 1,
    "Wednesday": 2,
    "Thursday": 3,
    "Friday": 4,
    "Saturday": 5,
    "Sunday": 6,
}


def calculate_meeting_dates(start_date: str, day_of_week: str, *, count: int = MAX_MEETINGS) -> list[str]:
    if not start_date or not day_of_week:
        raise ValidationError("Start date and day of week are required")

    target = DAY_INDEX.get(day_of_week.strip())
    if target is None:
        raise ValidationError(f"Invalid day of week: {day_of_week}", field="day")

    current = parse_iso_date(start_date)
    current += timedelta(days=(target - current.weekday()) % 7)
    return [format_iso_date(current + timedelta(weeks=i)) for i in range(count)]


def get_meeting_number_by_date(target_date: str, meeting_dates: Sequence[str]) -> Optional[int]:
    try:
        return list(meeting_dates).index(target_date) + 1
    except ValueError:
        return None


def get_next_meeting(meeting_dates: Sequence[str], current_date: Optional[str] = None) -> Optional[dict]:
    today = current_date or today_utc()
    for i, d in enumerate(meeting_dates):
        if d >= today:
            return {"meetingNumber": i + 1, "date": d}
    return None


def get_today_meeting(meeting_dates: Sequence[str], current_date: Optional[str] = None) -> Optional[dict]:
    today = current_date or today_utc()
    number = get_meeting_number_by_date(today, meeting_dates)
    return {"meetingNumber": number, "date": today} if number else None


def is_semester_finished(meeting_dates: Sequence[str], current_date: Optional[str] = None) -> bool:
    if not meeting_dates:
        return False
    return (current_date or today_utc()) > meeting_dates[-1]


def get_meeting_stats(
    meeting_dates: Sequence[str],
    attendance_dates: Sequence[str] = (),
    current_date: Optional[str] = None,
) -> dict:
    today = current_date or today_utc()
    passed = [d for d in meeting_dates if d < today]
    attended = [d for d in attendance_dates if d in passed]
    upcoming = [d for d in meeting_dates if d > today]

    return {
        "totalMeetings": len(meeting_dates),
        "passedMeetings": len(passed),
        "attendedMeetings": len(attended),
        "upcomingMeetings": len(upcoming),
        "todayMeeting": get_today_meeting(meeting_dates, today),
        "attendanceRate": round_half_up(len(attended) / len(passed) * 100) if passed else 0,
        "isFinished": is_semester_finished(meeting_dates, today),
    }
