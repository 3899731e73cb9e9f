from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.campus_schedule.campus_schedule.container import build_container
from src.campus_schedule.campus_schedule.database.bootstrap import ensure_indexes, list_collections


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)

    db = container.conn.db
    ensure_indexes(db)
    result = container.subject_service.initialize_attendance_dates()
    print(
        f"OK: indexes ensured on {settings.MONGO_URI}/{settings.MONGO_DB_NAME} "
        f"(collections={len(list_collections(db))}, "
        f"legacy subjects backfilled: {result['updatedSubjects']}/{result['foundSubjects']})"
    )
    container.conn.close()


if __name__ == "__main__":
    main()
