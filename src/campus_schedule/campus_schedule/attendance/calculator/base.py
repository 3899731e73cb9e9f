from __future__ import annotations

from abc import ABC, abstractmethod

from ...subjects.model import Subject


class MeetingPolicy(ABC):
    """How many meetings a subject could have been attended (Strategy Pattern)."""

    @abstractmethod
    def possible_meetings(self, subject: Subject) -> int:
        raise NotImplementedError
