from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping

from ..common.datetime_utils import get_zone, now_utc
from ..core.enums import Theme
from ..core.exceptions import ValidationError
from .model import UserSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("id", "en")


def _validate(data: Mapping[str, Any]) -> dict:
    if not isinstance(data, Mapping):
        raise ValidationError("Settings payload must be an object")

    fields: dict = {}
    if "theme" in data:
        try:
            fields["theme"] = Theme(data["theme"]).value
        except ValueError:
            raise ValidationError("theme must be light, dark or system", field="theme")
    if "notifications" in data:
        if not isinstance(data["notifications"], bool):
            raise ValidationError("notifications must be true or false", field="notifications")
        fields["notifications"] = data["notifications"]
    if "language" in data:
        if data["language"] not in SUPPORTED_LANGUAGES:
            raise ValidationError(f"language must be one of {', '.join(SUPPORTED_LANGUAGES)}", field="language")
        fields["language"] = data["language"]
    if "timezone" in data:
        name = data["timezone"]
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("timezone must be a zone name", field="timezone")
        try:
            get_zone(name.strip())
        except ValueError:
            raise ValidationError(f"Unknown timezone: {name!r}", field="timezone")
        fields["timezone"] = name.strip()
    return fields


class SettingsService:
    def __init__(self, settings: SettingsRepository, *, clock: Callable[[], datetime] = now_utc):
        self._settings = settings
        self._clock = clock

    def get(self, user_id: str) -> UserSettings:
        return self._settings.get(user_id) or UserSettings(user_id=str(user_id))

    def save(self, user_id: str, data: Mapping[str, Any]) -> UserSettings:
        """Merge the given preferences into the stored ones (upsert)."""
        fields = _validate(data)
        if not fields:
            raise ValidationError("Nothing to update")
        defaults = UserSettings(user_id=str(user_id))
        seed = {
            "theme": defaults.theme,
            "notifications": defaults.notifications,
            "language": defaults.language,
            "timezone": defaults.timezone,
        }
        saved = self._settings.upsert(
            user_id,
            fields=fields,
            defaults={k: v for k, v in seed.items() if k not in fields},
            at=self._clock(),
        )
        logger.info("settings saved for user %s", user_id)
        return saved
