from __future__ import annotations

from typing import Iterable, Optional

from ...common.math_utils import round_half_up
from ...subjects.model import Subject
from .base import MeetingPolicy
from .standard_policy import StandardMeetingPolicy


def compute_attendance_percentage(subjects: Iterable[Subject], policy: Optional[MeetingPolicy] = None) -> int:
    """Attended meetings over possible meetings across ``subjects``, 0..100.

    Pure: reads only its arguments. Returns 0 when no meeting was possible.
    """
    policy = policy or StandardMeetingPolicy()
    attended = 0
    possible = 0
    for subject in subjects:
        attended += len(subject.attendance_dates)
        possible += policy.possible_meetings(subject)

    if possible <= 0:
        return 0
    return round_half_up(min(100.0, attended * 100 / possible))
