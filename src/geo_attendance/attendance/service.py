from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, List, Optional, Tuple

import structlog

from ..common.datetime_utils import as_utc, now_utc, utc_day_key
from ..core.constants import (
    AUDIT_NEAREST_REGIONS,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_TEAM_HISTORY_LIMIT,
    MAX_HISTORY_LIMIT,
    MAX_WRITE_ATTEMPTS,
)
from ..core.enums import Role
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    AuthorizationError,
    ConcurrentUpdate,
    DuplicateRecordError,
    InvalidTimestamp,
    NoLocationsConfigured,
    NotCheckedIn,
    NotFoundError,
    OutsideGeofence,
)
from ..geofence.evaluator import bypass_region, locate, nearest_regions, require_valid
from ..geofence.model import Coordinate, GeoRegion
from ..locations.repository import LocationRepository
from ..notifications.notifier import AttendanceNotifier
from ..users.repository import UserRepository
from .breaks import BreakTracker, parse_break_type
from .model import (
    AttendanceDay,
    Break,
    CheckInResult,
    CheckOutReport,
    CheckOutResult,
    MemberAttendance,
    TodayView,
    state_of,
)
from .policy import TimeClassificationConfig, decide_check_in, decide_check_out
from .repository import AttendanceRepository
from .strategies.base import StatusDecision

log = structlog.get_logger(__name__)


class AttendanceService:
    """Daily attendance lifecycle for one user.

    NOT_CHECKED_IN -> CHECKED_IN -> (ON_BREAK <-> CHECKED_IN) -> CHECKED_OUT

    The day is the UTC calendar date of ``now``, computed once per call.
    Writes after check-in are compare-and-set on the record version; a lost
    race re-reads the record and re-applies the rules, so the loser sees the
    winner's state.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        locations: LocationRepository,
        config: TimeClassificationConfig,
        *,
        notifier: Optional[AttendanceNotifier] = None,
        users: Optional[UserRepository] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._locations = locations
        self._config = config
        self._notifier = notifier
        self._users = users
        self._clock = clock

    @property
    def config(self) -> TimeClassificationConfig:
        return self._config

    def _now(self, now: Optional[datetime]) -> datetime:
        return as_utc(now or self._clock())

    def _require_day(self, user_id: int, work_date: date) -> AttendanceDay:
        day = self._attendance.get_for_user_and_date(user_id, work_date)
        if not day:
            raise NotCheckedIn()
        return day

    def _write(self, user_id: int, work_date: date, action: str, attempt: Callable[[AttendanceDay], bool]) -> AttendanceDay:
        """Run ``attempt`` against a fresh read until its compare-and-set write lands."""
        for n in range(1, MAX_WRITE_ATTEMPTS + 1):
            day = self._require_day(user_id, work_date)
            if attempt(day):
                return day
            log.warning("attendance.write_conflict", user_id=user_id, action=action, attempt=n, version=day.version)
        raise ConcurrentUpdate()

    def _resolve_region(self, user_id: int, coords: Coordinate, regions: List[GeoRegion]) -> GeoRegion:
        region = locate(coords, regions)
        if region is not None:
            return region

        if self._config.skip_geofence:
            region = bypass_region(regions)
            log.info("attendance.geofence_bypassed", user_id=user_id, substitute=region.name)
            return region

        log.warning(
            "attendance.geo_rejected",
            user_id=user_id,
            latitude=coords.latitude,
            longitude=coords.longitude,
            nearest_locations=[
                {"name": name, "distance_m": distance}
                for name, distance in nearest_regions(coords, regions, AUDIT_NEAREST_REGIONS)
            ],
        )
        raise OutsideGeofence()

    def check_in(self, user_id: int, coords: Coordinate, *, now: Optional[datetime] = None) -> CheckInResult:
        now = self._now(now)
        work_date = utc_day_key(now)

        require_valid(coords)

        if self._attendance.get_for_user_and_date(user_id, work_date):
            raise AlreadyCheckedIn()

        regions = [r for r in self._locations.list_active() if r.is_active]
        if not regions:
            raise NoLocationsConfigured()

        region = self._resolve_region(user_id, coords, regions)
        decision = decide_check_in(now, self._config)

        try:
            attendance_id = self._attendance.create_checkin(
                user_id=user_id,
                work_date=work_date,
                check_in_time=now,
                coords=coords,
                status=decision.status,
            )
        except DuplicateRecordError:
            raise AlreadyCheckedIn()

        record = self._require_day(user_id, work_date)
        log.info(
            "attendance.check_in",
            user_id=user_id,
            attendance_id=attendance_id,
            location=region.name,
            status=decision.status.value,
            note=decision.note,
            latitude=coords.latitude,
            longitude=coords.longitude,
        )

        if self._notifier:
            self._notifier.checked_in(user_id=user_id, attendance_id=attendance_id, location_name=region.name)

        return CheckInResult(record=record, location_name=region.name)

    def start_break(self, user_id: int, break_type: Any, *, now: Optional[datetime] = None) -> Break:
        now = self._now(now)
        work_date = utc_day_key(now)
        kind = parse_break_type(break_type)
        new_ids: List[int] = []

        def attempt(day: AttendanceDay) -> bool:
            BreakTracker(day).ensure_can_start(kind)
            if now < day.check_in_time:
                raise InvalidTimestamp("Break cannot start before check-in")
            break_id = self._attendance.add_break(
                attendance_id=day.attendance_id,
                expected_version=day.version,
                break_type=kind,
                duration_min=kind.duration_min,
                start_time=now,
            )
            if break_id is None:
                return False
            new_ids[:] = [break_id]
            return True

        self._write(user_id, work_date, "start_break", attempt)

        # look up by id: the break may already have been ended by another request
        day = self._require_day(user_id, work_date)
        started = next(b for b in day.breaks if b.break_id == new_ids[0])
        log.info(
            "attendance.break_started",
            user_id=user_id,
            break_id=started.break_id,
            type=kind.value,
            duration_min=started.duration_min,
        )
        return started

    def end_break(self, user_id: int, *, now: Optional[datetime] = None) -> Break:
        now = self._now(now)
        work_date = utc_day_key(now)
        closing: List[int] = []

        def attempt(day: AttendanceDay) -> bool:
            active = BreakTracker(day).ensure_can_end(now)
            closing[:] = [active.break_id]
            return self._attendance.close_break(
                attendance_id=day.attendance_id,
                expected_version=day.version,
                break_id=active.break_id,
                end_time=now,
            )

        self._write(user_id, work_date, "end_break", attempt)

        day = self._require_day(user_id, work_date)
        ended = next(b for b in day.breaks if b.break_id == closing[0])
        log.info("attendance.break_ended", user_id=user_id, break_id=ended.break_id, type=ended.type.value)
        return ended

    def check_out(
        self,
        user_id: int,
        coords: Coordinate,
        *,
        report: Optional[CheckOutReport] = None,
        now: Optional[datetime] = None,
    ) -> CheckOutResult:
        now = self._now(now)
        work_date = utc_day_key(now)
        report = report or CheckOutReport()

        require_valid(coords)
        decisions: List[StatusDecision] = []

        def attempt(day: AttendanceDay) -> bool:
            if day.is_checked_out:
                raise AlreadyCheckedOut()
            BreakTracker(day).ensure_all_closed()
            if now <= day.check_in_time:
                raise InvalidTimestamp("Check-out time must be after check-in time")
            decisions[:] = [decide_check_out(now, self._config, day.status)]
            return self._attendance.update_checkout(
                attendance_id=day.attendance_id,
                expected_version=day.version,
                check_out_time=now,
                coords=coords,
                status=decisions[0].status,
                report=report,
            )

        self._write(user_id, work_date, "check_out", attempt)

        record = self._require_day(user_id, work_date)
        hours_worked = record.hours_worked or 0.0
        log.info(
            "attendance.check_out",
            user_id=user_id,
            attendance_id=record.attendance_id,
            hours_worked=round(hours_worked, 2),
            status=record.status.value,
            note=decisions[0].note,
        )

        if self._notifier:
            self._notifier.checked_out(user_id=user_id, attendance_id=record.attendance_id, hours_worked=hours_worked)

        return CheckOutResult(record=record, hours_worked=hours_worked)

    def get_today(self, user_id: int, *, now: Optional[datetime] = None) -> TodayView:
        work_date = utc_day_key(self._now(now))
        record = self._attendance.get_for_user_and_date(user_id, work_date)
        return TodayView(work_date=work_date, state=state_of(record), record=record)

    def get_history(self, user_id: int, *, page: int = 1, limit: int = DEFAULT_HISTORY_LIMIT) -> Tuple[List[AttendanceDay], int]:
        page = max(1, int(page))
        limit = min(MAX_HISTORY_LIMIT, max(1, int(limit)))
        rows = self._attendance.get_recent_for_user(user_id, limit, (page - 1) * limit)
        return list(rows), self._attendance.count_for_user(user_id)

    # Team views for admins and team leads

    def _team_lead_of(self, team_id: Optional[int]) -> Optional[int]:
        if team_id is None or self._users is None:
            return None
        return self._users.get_team_lead_id(team_id)

    def _ensure_can_view_team(self, requester_id: int, requester_role: Role, team_id: int) -> None:
        if requester_role == Role.ADMIN:
            return
        if requester_role == Role.LEAD and self._team_lead_of(team_id) == requester_id:
            return
        log.warning("attendance.team_view_denied", requester_id=requester_id, team_id=team_id)
        raise AuthorizationError("You can only view attendance for your own team")

    def _ensure_can_view_user(self, requester_id: int, requester_role: Role, user_id: int) -> None:
        if requester_role == Role.ADMIN:
            return
        if requester_role == Role.LEAD and self._users is not None:
            member = self._users.get_by_id(user_id)
            if member is not None and self._team_lead_of(member.team_id) == requester_id:
                return
        log.warning("attendance.member_view_denied", requester_id=requester_id, user_id=user_id)
        raise AuthorizationError("You can only view attendance for your team members")

    def get_team_history(
        self,
        requester_id: int,
        requester_role: Role,
        team_id: int,
        *,
        work_date: Optional[date] = None,
        page: int = 1,
        limit: int = DEFAULT_TEAM_HISTORY_LIMIT,
    ) -> Tuple[List[MemberAttendance], int]:
        """Members' days of one team, newest first.

        Admins see every team; a lead sees only the team they lead.
        """
        self._ensure_can_view_team(requester_id, requester_role, team_id)
        page = max(1, int(page))
        limit = min(MAX_HISTORY_LIMIT, max(1, int(limit)))
        rows = self._attendance.get_recent_for_team(team_id, limit, (page - 1) * limit, work_date=work_date)
        return list(rows), self._attendance.count_for_team(team_id, work_date=work_date)

    def get_user_history(
        self,
        requester_id: int,
        requester_role: Role,
        user_id: int,
        *,
        page: int = 1,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Tuple[List[AttendanceDay], int]:
        self._ensure_can_view_user(requester_id, requester_role, user_id)
        return self.get_history(user_id, page=page, limit=limit)

    def get_breaks(self, requester_id: int, requester_role: Role, attendance_id: int) -> List[Break]:
        day = self._attendance.get_by_id(attendance_id)
        if day is None:
            raise NotFoundError("Attendance record not found")
        if day.user_id != requester_id:
            self._ensure_can_view_user(requester_id, requester_role, day.user_id)
        return list(self._attendance.get_breaks(attendance_id))
