from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from pymongo import ReturnDocument

from ..database.bootstrap import SETTINGS
from ..database.connection import DatabaseConnection
from .model import UserSettings
from .repository import SettingsRepository

_DEFAULTS = UserSettings(user_id="")


def _to_settings(doc: Mapping[str, Any]) -> UserSettings:
    return UserSettings(
        user_id=str(doc["userId"]),
        theme=doc.get("theme") or _DEFAULTS.theme,
        notifications=bool(doc.get("notifications", _DEFAULTS.notifications)),
        language=doc.get("language") or _DEFAULTS.language,
        timezone=doc.get("timezone") or _DEFAULTS.timezone,
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


class MongoSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @property
    def _settings(self):
        return self._conn_factory.db[SETTINGS]

    def get(self, user_id: str) -> Optional[UserSettings]:
        doc = self._settings.find_one({"userId": str(user_id)})
        return _to_settings(doc) if doc else None

    def upsert(
        self,
        user_id: str,
        *,
        fields: Mapping[str, Any],
        defaults: Mapping[str, Any],
        at: datetime,
    ) -> UserSettings:
        doc = self._settings.find_one_and_update(
            {"userId": str(user_id)},
            {"$set": {**dict(fields), "updatedAt": at}, "$setOnInsert": {**dict(defaults), "createdAt": at}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return _to_settings(doc)
