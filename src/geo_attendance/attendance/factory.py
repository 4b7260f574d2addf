from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from ..core.enums import AttendanceStatus
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy

if TYPE_CHECKING:
    from .policy import TimeClassificationConfig


def _is_after(now: datetime, hour: int, minute: int) -> bool:
    # minute resolution: 14:00:59 is not after 14:00
    return now.hour > hour or (now.hour == hour and now.minute > minute)


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules.

    ``now`` is expected to be wall-clock time already.
    """

    def for_checkin(self, *, now: datetime, cfg: "TimeClassificationConfig") -> AttendanceStrategy:
        if _is_after(now, cfg.half_day_hour, 0):
            return HalfDayStrategy()

        late_hour, late_minute = cfg.late_after
        if _is_after(now, late_hour, late_minute):
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(
        self,
        *,
        now: datetime,
        cfg: "TimeClassificationConfig",
        current_status: AttendanceStatus,
    ) -> AttendanceStrategy:
        if now.hour < cfg.half_day_hour:
            return HalfDayStrategy()
        return NormalStrategy()
