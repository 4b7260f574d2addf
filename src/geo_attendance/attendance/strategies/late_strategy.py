from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Checked in late at {now:%H:%M}")

    def decide_checkout(self, *, now: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
