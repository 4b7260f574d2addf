from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Check-in after the half-day cutoff, or check-out before it.

    A half day is never corrected back by a later check-out.
    """

    def decide_checkin(self, *, now: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY, note=f"Checked in after half-day cutoff at {now:%H:%M}")

    def decide_checkout(self, *, now: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY, note=f"Checked out before half-day cutoff at {now:%H:%M}")
