"""Example: use the service layer directly (no Flask).

Prints the attendance summary and today's status for one user.
"""

import importlib
import sys

from config import get_settings_module

from src.campus_schedule.campus_schedule.common.datetime_utils import today_utc
from src.campus_schedule.campus_schedule.container import build_container


def main():
    if len(sys.argv) < 2:
        print("usage: python -m examples.example_usage <user-id>")
        raise SystemExit(2)
    user_id = sys.argv[1]

    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)
    print(container.attendance_ledger.summary(user_id))
    print(container.history_service.attendance_status(user_id, day=today_utc()))


if __name__ == "__main__":
    main()
