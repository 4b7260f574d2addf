"""Break tracking rules for a single attendance day.

The tracker only checks rules against a snapshot of the day; the service
persists the result with a compare-and-set write so the checks and the write
apply to the same version of the record.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from ..core.enums import BreakType
from ..core.exceptions import (
    AlreadyCheckedOut,
    BreakAlreadyActive,
    BreakStillActive,
    InvalidBreakType,
    InvalidTimestamp,
    LunchAlreadyTaken,
    NoActiveBreak,
)
from .model import AttendanceDay, Break


def parse_break_type(value: Any) -> BreakType:
    if isinstance(value, BreakType):
        return value
    try:
        return BreakType(str(value).strip().upper())
    except ValueError:
        raise InvalidBreakType()


class BreakTracker:
    """Validates break transitions on one AttendanceDay."""

    def __init__(self, day: AttendanceDay):
        self._day = day

    def ensure_can_start(self, break_type: BreakType) -> None:
        day = self._day
        if day.is_checked_out:
            raise AlreadyCheckedOut()
        if day.open_break is not None:
            raise BreakAlreadyActive()
        if break_type == BreakType.LUNCH and day.lunch_taken:
            raise LunchAlreadyTaken()

    def ensure_can_end(self, now: datetime) -> Break:
        active = self._day.open_break
        if active is None:
            raise NoActiveBreak()
        if now <= active.start_time:
            raise InvalidTimestamp("Break end time must be after its start time")
        return active

    def ensure_all_closed(self) -> None:
        active = self._day.open_break
        if active is not None:
            raise BreakStillActive(
                f"You are currently on a {active.type.value} break. "
                "Please end your break before checking out."
            )
