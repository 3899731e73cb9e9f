from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def format_iso_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz=timezone.utc)


def today_utc() -> str:
    return format_iso_date(now_utc().date())


def get_zone(name: str):
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        raise ValueError(f"Unknown timezone: {name!r}")


def day_window(day: date, tz_name: str = "UTC") -> tuple[datetime, datetime]:
    """Return the [start, end) UTC bounds of a calendar day in ``tz_name``.

    The upper bound is 23:59:59.999 of that day, exclusive.
    """
    tz = get_zone(tz_name)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = start + timedelta(days=1) - timedelta(milliseconds=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    # Naive timestamps are taken as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def today_in(tz_name: str = "UTC", *, now: Optional[datetime] = None) -> str:
    return format_iso_date((now or now_utc()).astimezone(get_zone(tz_name)).date())


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed); naive values are taken as UTC."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid timestamp: {value!r}")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid timestamp: {value!r}")
    return ensure_utc(parsed)
