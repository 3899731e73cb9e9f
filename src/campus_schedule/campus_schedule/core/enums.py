from __future__ import annotations

from enum import Enum


class AttendanceAction(str, Enum):
    """Ledger mutation requested for a subject date."""

    ADD = "add"
    REMOVE = "remove"


class IdentitySource(str, Enum):
    """Which credential resolved the caller."""

    SESSION = "session"
    REMEMBER = "remember"


class SubjectCategory(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
