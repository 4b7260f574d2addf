"""Time classification policy.

Status is decided from the wall-clock hour/minute of the event. The wall
clock is the configured office timezone, or the server's local time when no
office timezone is configured. Record identity (the attendance day) is
always the UTC calendar date and does not depend on this setting.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import is_known_timezone, wall_clock
from ..core.constants import (
    DEFAULT_HALF_DAY_HOUR,
    DEFAULT_LATE_THRESHOLD_MINUTES,
    DEFAULT_OFFICE_END_HOUR,
    DEFAULT_OFFICE_START_HOUR,
)
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConfigurationError
from .factory import AttendanceStrategyFactory
from .strategies.base import StatusDecision


@dataclass(frozen=True)
class TimeClassificationConfig:
    office_start_hour: int = DEFAULT_OFFICE_START_HOUR
    late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES
    half_day_hour: int = DEFAULT_HALF_DAY_HOUR
    # validated and carried as config only; no status rule reads it
    office_end_hour: int = DEFAULT_OFFICE_END_HOUR
    skip_geofence: bool = False
    timezone: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("office_start_hour", "half_day_hour", "office_end_hour"):
            value = getattr(self, name)
            if not 0 <= int(value) <= 23:
                raise ConfigurationError(f"{name} must be between 0 and 23, got {value}")
        if int(self.late_threshold_minutes) < 0:
            raise ConfigurationError("late_threshold_minutes must not be negative")
        if self.timezone and not is_known_timezone(self.timezone):
            raise ConfigurationError(f"Unknown office timezone: {self.timezone}")

    @property
    def late_after(self) -> tuple[int, int]:
        """(hour, minute) after which a check-in counts as late."""
        return (
            self.office_start_hour + self.late_threshold_minutes // 60,
            self.late_threshold_minutes % 60,
        )

    @classmethod
    def from_settings(cls, settings: Any) -> "TimeClassificationConfig":
        return cls(
            office_start_hour=int(getattr(settings, "OFFICE_START_HOUR", DEFAULT_OFFICE_START_HOUR)),
            late_threshold_minutes=int(getattr(settings, "LATE_THRESHOLD_MINUTES", DEFAULT_LATE_THRESHOLD_MINUTES)),
            half_day_hour=int(getattr(settings, "HALF_DAY_HOUR", DEFAULT_HALF_DAY_HOUR)),
            office_end_hour=int(getattr(settings, "OFFICE_END_HOUR", DEFAULT_OFFICE_END_HOUR)),
            skip_geofence=bool(getattr(settings, "SKIP_GEOFENCE", False)),
            timezone=getattr(settings, "OFFICE_TIMEZONE", None) or None,
        )


_factory = AttendanceStrategyFactory()


def decide_check_in(now: datetime, cfg: TimeClassificationConfig) -> StatusDecision:
    local = wall_clock(now, cfg.timezone)
    return _factory.for_checkin(now=local, cfg=cfg).decide_checkin(now=local)


def decide_check_out(now: datetime, cfg: TimeClassificationConfig, current_status: AttendanceStatus) -> StatusDecision:
    local = wall_clock(now, cfg.timezone)
    strategy = _factory.for_checkout(now=local, cfg=cfg, current_status=current_status)
    return strategy.decide_checkout(now=local, current=current_status)


def classify_check_in(now: datetime, cfg: TimeClassificationConfig) -> AttendanceStatus:
    return decide_check_in(now, cfg).status


def classify_check_out(now: datetime, cfg: TimeClassificationConfig, current_status: AttendanceStatus) -> AttendanceStatus:
    return decide_check_out(now, cfg, current_status).status
