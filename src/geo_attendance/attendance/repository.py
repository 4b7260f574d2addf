from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, BreakType
from ..geofence.model import Coordinate
from .model import AttendanceDay, Break, CheckOutReport, MemberAttendance


class AttendanceRepository(Protocol):
    """Storage contract for attendance days and their breaks.

    Uniqueness of (user_id, work_date) must be enforced by the store:
    ``create_checkin`` raises DuplicateRecordError when the row exists.

    Mutating methods take the version the caller read and report failure
    (False, or None for ``add_break``), without writing, when the stored
    version differs. A successful write increments the version.
    """

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceDay]:
        raise NotImplementedError

    def get_recent_for_user(self, user_id: int, limit: int, offset: int = 0) -> Sequence[AttendanceDay]:
        raise NotImplementedError

    def count_for_user(self, user_id: int) -> int:
        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceDay]:
        raise NotImplementedError

    def get_recent_for_team(
        self,
        team_id: int,
        limit: int,
        offset: int = 0,
        *,
        work_date: Optional[date] = None,
    ) -> Sequence[MemberAttendance]:
        """Days of the team's members, newest first, with the member's name."""
        raise NotImplementedError

    def count_for_team(self, team_id: int, *, work_date: Optional[date] = None) -> int:
        raise NotImplementedError

    def get_breaks(self, attendance_id: int) -> List[Break]:
        """Breaks of one day ordered by start time."""
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        coords: Coordinate,
        status: AttendanceStatus,
    ) -> int:
        raise NotImplementedError

    def add_break(
        self,
        *,
        attendance_id: int,
        expected_version: int,
        break_type: BreakType,
        duration_min: int,
        start_time: datetime,
    ) -> Optional[int]:
        """Id of the new break, or None when the version check fails."""
        raise NotImplementedError

    def close_break(
        self,
        *,
        attendance_id: int,
        expected_version: int,
        break_id: int,
        end_time: datetime,
    ) -> bool:
        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        expected_version: int,
        check_out_time: datetime,
        coords: Coordinate,
        status: AttendanceStatus,
        report: CheckOutReport,
    ) -> bool:
        raise NotImplementedError
