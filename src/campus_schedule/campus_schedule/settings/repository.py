from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol

from .model import UserSettings


class SettingsRepository(Protocol):
    def get(self, user_id: str) -> Optional[UserSettings]:
        raise NotImplementedError

    def upsert(
        self,
        user_id: str,
        *,
        fields: Mapping[str, Any],
        defaults: Mapping[str, Any],
        at: datetime,
    ) -> UserSettings:
        """Set ``fields`` on the user's document in one atomic upsert.

        ``defaults`` are written only when the document is created.
        """
        raise NotImplementedError
