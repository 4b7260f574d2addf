from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import AttendanceState, AttendanceStatus, BreakType
from ..geofence.model import Coordinate


@dataclass(frozen=True)
class Break:
    """Domain entity: a typed pause inside one attendance day."""

    break_id: int
    attendance_id: int
    type: BreakType
    duration_min: int
    start_time: datetime
    end_time: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class CheckOutReport:
    """Free-text shift report submitted at check-out."""

    work_done: Optional[str] = None
    project_name: Optional[str] = None
    meetings: Optional[str] = None
    todo_updates: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AttendanceDay:
    """Domain entity: one user's attendance on one UTC calendar date.

    ``version`` increases on every write and is used for compare-and-set
    updates by the service.
    """

    attendance_id: int
    user_id: int
    work_date: date
    check_in_time: datetime
    check_in_coords: Coordinate
    status: AttendanceStatus
    check_out_time: Optional[datetime] = None
    check_out_coords: Optional[Coordinate] = None
    report: CheckOutReport = field(default_factory=CheckOutReport)
    breaks: Tuple[Break, ...] = ()
    version: int = 1

    @property
    def is_checked_out(self) -> bool:
        return self.check_out_time is not None

    @property
    def open_break(self) -> Optional[Break]:
        # latest open break first; there is at most one
        for b in reversed(self.breaks):
            if b.is_open:
                return b
        return None

    @property
    def lunch_taken(self) -> bool:
        return any(b.type == BreakType.LUNCH for b in self.breaks)

    @property
    def state(self) -> AttendanceState:
        if self.is_checked_out:
            return AttendanceState.CHECKED_OUT
        if self.open_break is not None:
            return AttendanceState.ON_BREAK
        return AttendanceState.CHECKED_IN

    @property
    def hours_worked(self) -> Optional[float]:
        if self.check_out_time is None:
            return None
        return (self.check_out_time - self.check_in_time).total_seconds() / 3600


def state_of(day: Optional[AttendanceDay]) -> AttendanceState:
    return day.state if day is not None else AttendanceState.NOT_CHECKED_IN


@dataclass(frozen=True)
class CheckInResult:
    record: AttendanceDay
    location_name: str

    @property
    def status(self) -> AttendanceStatus:
        return self.record.status


@dataclass(frozen=True)
class CheckOutResult:
    record: AttendanceDay
    hours_worked: float

    @property
    def status(self) -> AttendanceStatus:
        return self.record.status


@dataclass(frozen=True)
class MemberAttendance:
    """One team member's day, as shown to admins and team leads."""

    record: AttendanceDay
    full_name: str


@dataclass(frozen=True)
class TodayView:
    """Read-model for the dashboard: today's state plus the record if any."""

    work_date: date
    state: AttendanceState
    record: Optional[AttendanceDay] = None
