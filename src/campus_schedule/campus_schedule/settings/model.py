from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class UserSettings:
    """Per-user display preferences. Unsaved users get the defaults below."""

    user_id: str
    theme: str = "light"
    notifications: bool = True
    language: str = "id"
    timezone: str = "Asia/Jakarta"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "theme": self.theme,
            "notifications": self.notifications,
            "language": self.language,
            "timezone": self.timezone,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
