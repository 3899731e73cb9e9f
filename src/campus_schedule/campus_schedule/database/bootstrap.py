from __future__ import annotations

import logging

from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

logger = logging.getLogger(__name__)

USERS = "users"
SUBJECTS = "subjects"
ATTENDANCE_HISTORY = "attendance_history"
SETTINGS = "settings"
TASKS = "tasks"


def ensure_indexes(db: Database) -> None:
    """Create the indexes the repositories rely on (idempotent)."""
    db[USERS].create_index([("email", ASCENDING)], unique=True, name="email_unique")
    db[USERS].create_index(
        [("nim", ASCENDING)],
        unique=True,
        name="nim_unique",
        partialFilterExpression={"nim": {"$type": "string"}},
    )
    db[USERS].create_index([("rememberToken", ASCENDING)], sparse=True, name="remember_token")

    db[SUBJECTS].create_index([("userId", ASCENDING), ("day", ASCENDING)])
    db[SUBJECTS].create_index([("userId", ASCENDING), ("specificDate", ASCENDING)])
    db[SUBJECTS].create_index([("userId", ASCENDING), ("name", ASCENDING)])
    db[SUBJECTS].create_index([("id", ASCENDING)])

    db[ATTENDANCE_HISTORY].create_index([("userId", ASCENDING), ("attendanceDate", DESCENDING)])
    db[ATTENDANCE_HISTORY].create_index([("userId", ASCENDING), ("subjectId", ASCENDING)])

    db[SETTINGS].create_index([("userId", ASCENDING)], unique=True, name="settings_user_unique")

    db[TASKS].create_index([("userId", ASCENDING), ("status", ASCENDING)])
    db[TASKS].create_index([("userId", ASCENDING), ("dueDate", ASCENDING)])
    db[TASKS].create_index([("userId", ASCENDING), ("subjectId", ASCENDING)])
    db[TASKS].create_index([("id", ASCENDING)])
    logger.info("indexes ensured on %s", db.name)


def list_collections(db: Database) -> list[str]:
    return sorted(db.list_collection_names())
