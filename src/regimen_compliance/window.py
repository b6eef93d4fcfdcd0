"""Week window resolution: seven zone-local calendar days from a week-start marker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from .timezones import day_key, resolve_zone

WEEK_DAYS = 7


@dataclass(frozen=True)
class DayWindow:
    """Half-open ``[start, end)`` interval covering one zone-local day."""

    day: date
    start: datetime
    end: datetime

    @property
    def key(self) -> str:
        return day_key(self.day)


def parse_week_start(raw: date | str) -> date:
    """Accept a calendar date or ``YYYY-MM-DD``; timestamps are rejected, not truncated."""
    if isinstance(raw, datetime):
        raise ValueError("week start must be a calendar date, not a timestamp")
    if isinstance(raw, date):
        return raw
    text = raw.strip()
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"week start is not an ISO calendar date: {raw!r}") from exc


def _local_midnight(day: date, zone: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=zone)


def day_window(day: date, zone: ZoneInfo) -> DayWindow:
    # Bounds come from local midnights, so DST days are 23 or 25 hours long.
    return DayWindow(
        day=day,
        start=_local_midnight(day, zone),
        end=_local_midnight(day + timedelta(days=1), zone),
    )


def resolve_week(week_start: date | str, timezone_name: str) -> list[DayWindow]:
    zone = resolve_zone(timezone_name)
    first_day = parse_week_start(week_start)
    return [day_window(first_day + timedelta(days=offset), zone) for offset in range(WEEK_DAYS)]


def fetch_bounds(windows: list[DayWindow], *, slop_days: int = 1) -> tuple[datetime, datetime]:
    """UTC-comparable bounds wide enough to cover zone-boundary slop on both ends."""
    return (
        windows[0].start - timedelta(days=slop_days),
        windows[-1].end + timedelta(days=slop_days),
    )
