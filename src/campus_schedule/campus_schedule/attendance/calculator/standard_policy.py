from __future__ import annotations

from ...core.constants import MAX_MEETINGS
from ...subjects.model import Subject
from .base import MeetingPolicy


class StandardMeetingPolicy(MeetingPolicy):
    """One-off subjects count 1, scheduled subjects their meeting dates, legacy subjects 14."""

    def possible_meetings(self, subject: Subject) -> int:
        if subject.specific_date:
            return 1
        if subject.meeting_dates is not None:
            return len(subject.meeting_dates)
        return MAX_MEETINGS
