from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from geo_attendance.attendance.model import AttendanceDay, Break, MemberAttendance
from geo_attendance.attendance.policy import TimeClassificationConfig
from geo_attendance.attendance.service import AttendanceService
from geo_attendance.core.enums import Role
from geo_attendance.core.exceptions import DuplicateRecordError
from geo_attendance.geofence.model import Coordinate, GeoRegion
from geo_attendance.notifications.notifier import AttendanceNotifier
from geo_attendance.users.model import User

HQ = GeoRegion(id="hq", name="HQ", latitude=12.9716, longitude=77.5946, radius_meters=100)
ANNEX = GeoRegion(id="annex", name="Annex", latitude=12.9800, longitude=77.6000, radius_meters=200)


class InMemoryAttendance:
    """Thread-safe stand-in for the attendance store.

    Mirrors the storage contract: unique (user_id, work_date) and
    compare-and-set writes on ``version``. Team queries join through
    ``users`` when one is given.
    """

    def __init__(self, users=None):
        self._lock = threading.Lock()
        self._users = users
        self._by_user_date: dict[tuple[int, date], AttendanceDay] = {}
        self._id = 0
        self._break_id = 0

    def _find(self, attendance_id: int) -> Optional[tuple[tuple[int, date], AttendanceDay]]:
        for k, v in self._by_user_date.items():
            if v.attendance_id == attendance_id:
                return k, v
        return None

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceDay]:
        with self._lock:
            return self._by_user_date.get((user_id, work_date))

    def get_recent_for_user(self, user_id: int, limit: int, offset: int = 0):
        with self._lock:
            items = [r for r in self._by_user_date.values() if r.user_id == user_id]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[offset:offset + limit]

    def count_for_user(self, user_id: int) -> int:
        with self._lock:
            return sum(1 for r in self._by_user_date.values() if r.user_id == user_id)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceDay]:
        with self._lock:
            found = self._find(attendance_id)
        return found[1] if found else None

    def _team_days(self, team_id: int, work_date: Optional[date]) -> list[MemberAttendance]:
        with self._lock:
            days = list(self._by_user_date.values())
        rows = []
        for day in days:
            member = self._users.get_by_id(day.user_id) if self._users else None
            if member is None or member.team_id != team_id:
                continue
            if work_date is not None and day.work_date != work_date:
                continue
            rows.append(MemberAttendance(record=day, full_name=member.full_name))
        rows.sort(key=lambda m: (m.record.work_date, m.record.attendance_id), reverse=True)
        return rows

    def get_recent_for_team(self, team_id: int, limit: int, offset: int = 0, *, work_date=None):
        return self._team_days(team_id, work_date)[offset:offset + limit]

    def count_for_team(self, team_id: int, *, work_date=None) -> int:
        return len(self._team_days(team_id, work_date))

    def get_breaks(self, attendance_id: int) -> list[Break]:
        day = self.get_by_id(attendance_id)
        if day is None:
            return []
        return sorted(day.breaks, key=lambda b: (b.start_time, b.break_id))

    def create_checkin(self, *, user_id, work_date, check_in_time, coords, status) -> int:
        with self._lock:
            if (user_id, work_date) in self._by_user_date:
                raise DuplicateRecordError()
            self._id += 1
            self._by_user_date[(user_id, work_date)] = AttendanceDay(
                attendance_id=self._id,
                user_id=user_id,
                work_date=work_date,
                check_in_time=check_in_time,
                check_in_coords=coords,
                status=status,
            )
            return self._id

    def add_break(self, *, attendance_id, expected_version, break_type, duration_min, start_time) -> Optional[int]:
        with self._lock:
            found = self._find(attendance_id)
            if not found or found[1].version != expected_version:
                return None
            key, day = found
            self._break_id += 1
            new_break = Break(
                break_id=self._break_id,
                attendance_id=attendance_id,
                type=break_type,
                duration_min=duration_min,
                start_time=start_time,
            )
            self._by_user_date[key] = replace(day, breaks=day.breaks + (new_break,), version=day.version + 1)
            return self._break_id

    def close_break(self, *, attendance_id, expected_version, break_id, end_time) -> bool:
        with self._lock:
            found = self._find(attendance_id)
            if not found or found[1].version != expected_version:
                return False
            key, day = found
            breaks = tuple(
                replace(b, end_time=end_time) if b.break_id == break_id and b.is_open else b
                for b in day.breaks
            )
            self._by_user_date[key] = replace(day, breaks=breaks, version=day.version + 1)
            return True

    def update_checkout(self, *, attendance_id, expected_version, check_out_time, coords, status, report) -> bool:
        with self._lock:
            found = self._find(attendance_id)
            if not found or found[1].version != expected_version:
                return False
            key, day = found
            self._by_user_date[key] = replace(
                day,
                check_out_time=check_out_time,
                check_out_coords=coords,
                status=status,
                report=report,
                version=day.version + 1,
            )
            return True


class InMemoryLocations:
    def __init__(self, regions=()):
        self._regions: dict[str, GeoRegion] = {r.id: r for r in regions}
        self._id = 0

    def list_active(self):
        return [r for r in self._regions.values() if r.is_active]

    def get_by_id(self, location_id: str) -> Optional[GeoRegion]:
        return self._regions.get(location_id)

    def create(self, *, name, latitude, longitude, radius_meters) -> GeoRegion:
        self._id += 1
        region = GeoRegion(
            id=f"loc-{self._id}",
            name=name,
            latitude=latitude,
            longitude=longitude,
            radius_meters=radius_meters,
            created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
        )
        self._regions[region.id] = region
        return region

    def update(self, location_id: str, changes: dict) -> Optional[GeoRegion]:
        region = self._regions.get(location_id)
        if not region:
            return None
        self._regions[location_id] = replace(region, **changes)
        return self._regions[location_id]

    def deactivate(self, location_id: str) -> bool:
        region = self._regions.get(location_id)
        if not region:
            return False
        self._regions[location_id] = replace(region, is_active=False)
        return True


class InMemoryUsers:
    def __init__(self, users=(), team_leads=None):
        self._users = {u.user_id: u for u in users}
        self._team_leads = dict(team_leads or {})

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    def list_active_by_role(self, role: Role):
        return [u for u in self._users.values() if u.role == role and u.is_active]

    def get_team_lead_id(self, team_id: int) -> Optional[int]:
        return self._team_leads.get(team_id)


class RecordingSender:
    def __init__(self):
        self.sent: list[dict] = []

    def send(self, *, user_id, event_type, title, message, metadata=None) -> None:
        self.sent.append(
            {"user_id": user_id, "event_type": event_type, "title": title, "message": message, "metadata": metadata}
        )


class FailingSender:
    def send(self, **kwargs) -> None:
        raise RuntimeError("push gateway down")


EMPLOYEE = User(user_id=1, full_name="Asha Rao", role=Role.EMPLOYEE, team_id=7)
LEAD = User(user_id=2, full_name="Vikram Lead", role=Role.LEAD, team_id=7)
ADMIN = User(user_id=3, full_name="Admin One", role=Role.ADMIN)


@pytest.fixture
def policy() -> TimeClassificationConfig:
    return TimeClassificationConfig(
        office_start_hour=10,
        late_threshold_minutes=60,
        half_day_hour=14,
        timezone="UTC",
    )


@pytest.fixture
def attendance_repo(users_repo) -> InMemoryAttendance:
    return InMemoryAttendance(users_repo)


@pytest.fixture
def locations_repo() -> InMemoryLocations:
    return InMemoryLocations([HQ, ANNEX])


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers([EMPLOYEE, LEAD, ADMIN], team_leads={7: LEAD.user_id})


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def service(attendance_repo, locations_repo, users_repo, sender, policy) -> AttendanceService:
    return AttendanceService(
        attendance_repo,
        locations_repo,
        policy,
        notifier=AttendanceNotifier(users_repo, sender),
        users=users_repo,
    )


@pytest.fixture
def at_hq() -> Coordinate:
    return HQ.center


@pytest.fixture
def far_away() -> Coordinate:
    return Coordinate(13.0827, 80.2707)


@pytest.fixture
def make_fakes():
    """Factories for tests that need their own store or senders."""

    class _Fakes:
        attendance = InMemoryAttendance
        locations = InMemoryLocations
        users = InMemoryUsers
        recording_sender = RecordingSender
        failing_sender = FailingSender
        hq = HQ
        annex = ANNEX
        employee = EMPLOYEE
        lead = LEAD
        admin = ADMIN

    return _Fakes
