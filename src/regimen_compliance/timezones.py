"""Zone-local day helpers shared by every engine component."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigurationError

DEFAULT_TIMEZONE = "America/Denver"


def normalize_timezone_name(value: Any) -> str | None:
    """Normalize a timezone name and verify it's a valid IANA name."""
    if not isinstance(value, str):
        return None
    raw = value.strip()
    if not raw:
        return None
    if raw.upper() == "UTC":
        return "UTC"
    try:
        ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError):
        return None
    return raw


def resolve_zone(timezone_name: str) -> ZoneInfo:
    normalized = normalize_timezone_name(timezone_name)
    if normalized is None:
        raise ConfigurationError(f"Unknown IANA timezone: {timezone_name!r}")
    return ZoneInfo(normalized)


def as_utc(ts: datetime) -> datetime:
    """Naive timestamps are stored UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def local_date(value: datetime | date, zone: ZoneInfo) -> date:
    """Project a timestamp into the zone-local calendar date.

    A bare ``date`` is taken to already be zone-local and is returned as is.
    """
    if isinstance(value, datetime):
        return as_utc(value).astimezone(zone).date()
    return value


def day_key(day: date) -> str:
    return day.isoformat()
