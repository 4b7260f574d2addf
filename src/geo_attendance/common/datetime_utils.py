from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

import pytz


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current UTC time (timezone-aware).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_day_key(now: datetime) -> date:
    """Calendar date of ``now`` at UTC midnight; identifies an attendance day."""
    return as_utc(now).date()


def wall_clock(now: datetime, timezone_name: Optional[str] = None) -> datetime:
    """Wall-clock time used for time-of-day rules.

    Naive values are already wall-clock. Aware values are converted to the
    configured office timezone, or to the server's local timezone when none
    is configured.
    """
    if now.tzinfo is None:
        return now
    if timezone_name:
        return now.astimezone(pytz.timezone(timezone_name))
    return now.astimezone()


def is_known_timezone(timezone_name: str) -> bool:
    return timezone_name in pytz.all_timezones_set
