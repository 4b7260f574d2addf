from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.enums import AttendanceStatus, BreakType
from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone, is_duplicate_key
from ..geofence.model import Coordinate
from .model import AttendanceDay, Break, CheckOutReport, MemberAttendance
from .repository import AttendanceRepository

_DAY_FIELDS = (
    "attendance_id", "user_id", "work_date", "check_in_time", "check_in_lat", "check_in_long",
    "check_out_time", "check_out_lat", "check_out_long", "status",
    "work_done", "project_name", "meetings", "todo_updates", "notes", "version",
)
_DAY_COLUMNS = ", ".join(_DAY_FIELDS)


def _day_columns(alias: str) -> str:
    return ", ".join(f"{alias}.{c}" for c in _DAY_FIELDS)


def _to_db_time(value: datetime) -> datetime:
    # DATETIME columns hold naive UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _from_db_time(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


def _row_to_break(r: Dict[str, Any]) -> Break:
    return Break(
        break_id=int(r["break_id"]),
        attendance_id=int(r["attendance_id"]),
        type=BreakType(r["type"]),
        duration_min=int(r["duration_min"]),
        start_time=_from_db_time(r["start_time"]),
        end_time=_from_db_time(r.get("end_time")),
    )


def _row_to_day(r: Dict[str, Any], breaks: Sequence[Break]) -> AttendanceDay:
    check_out_coords = None
    if r.get("check_out_lat") is not None and r.get("check_out_long") is not None:
        check_out_coords = Coordinate(as_float(r["check_out_lat"]), as_float(r["check_out_long"]))

    return AttendanceDay(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in_time=_from_db_time(r["check_in_time"]),
        check_in_coords=Coordinate(as_float(r["check_in_lat"]), as_float(r["check_in_long"])),
        status=AttendanceStatus(r["status"]),
        check_out_time=_from_db_time(r.get("check_out_time")),
        check_out_coords=check_out_coords,
        report=CheckOutReport(
            work_done=r.get("work_done"),
            project_name=r.get("project_name"),
            meetings=r.get("meetings"),
            todo_updates=r.get("todo_updates"),
            notes=r.get("notes"),
        ),
        breaks=tuple(breaks),
        version=int(r["version"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_breaks(self, cur, attendance_ids: List[int]) -> Dict[int, List[Break]]:
        by_day: Dict[int, List[Break]] = {i: [] for i in attendance_ids}
        if not attendance_ids:
            return by_day

        placeholders = ",".join(["%s"] * len(attendance_ids))
        cur.execute(
            f"""
            SELECT break_id, attendance_id, type, duration_min, start_time, end_time
            FROM breaks
            WHERE attendance_id IN ({placeholders})
            ORDER BY start_time ASC, break_id ASC
            """,
            tuple(attendance_ids),
        )
        for r in fetchall(cur):
            by_day[int(r["attendance_id"])].append(_row_to_break(r))
        return by_day

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_DAY_COLUMNS}
                FROM attendance_days
                WHERE user_id=%s AND work_date=%s
                """,
                (user_id, work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            breaks = self._load_breaks(cur, [int(r["attendance_id"])])
            return _row_to_day(r, breaks[int(r["attendance_id"])])

    def get_recent_for_user(self, user_id: int, limit: int, offset: int = 0) -> Sequence[AttendanceDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_DAY_COLUMNS}
                FROM attendance_days
                WHERE user_id=%s
                ORDER BY work_date DESC
                LIMIT %s OFFSET %s
                """,
                (user_id, int(limit), int(offset)),
            )
            rows = fetchall(cur)
            breaks = self._load_breaks(cur, [int(r["attendance_id"]) for r in rows])
            return [_row_to_day(r, breaks[int(r["attendance_id"])]) for r in rows]

    def count_for_user(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM attendance_days WHERE user_id=%s", (user_id,))
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_DAY_COLUMNS} FROM attendance_days WHERE attendance_id=%s",
                (attendance_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            breaks = self._load_breaks(cur, [int(r["attendance_id"])])
            return _row_to_day(r, breaks[int(r["attendance_id"])])

    @staticmethod
    def _team_filter(team_id: int, work_date: Optional[date]) -> Tuple[str, tuple]:
        where = "u.team_id=%s"
        params: tuple = (team_id,)
        if work_date is not None:
            where += " AND a.work_date=%s"
            params += (work_date,)
        return where, params

    def get_recent_for_team(
        self,
        team_id: int,
        limit: int,
        offset: int = 0,
        *,
        work_date: Optional[date] = None,
    ) -> Sequence[MemberAttendance]:
        where, params = self._team_filter(team_id, work_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_day_columns("a")}, u.full_name
                FROM attendance_days a
                JOIN users u ON u.user_id = a.user_id
                WHERE {where}
                ORDER BY a.work_date DESC, a.attendance_id DESC
                LIMIT %s OFFSET %s
                """,
                params + (int(limit), int(offset)),
            )
            rows = fetchall(cur)
            breaks = self._load_breaks(cur, [int(r["attendance_id"]) for r in rows])
            return [
                MemberAttendance(record=_row_to_day(r, breaks[int(r["attendance_id"])]), full_name=r["full_name"])
                for r in rows
            ]

    def count_for_team(self, team_id: int, *, work_date: Optional[date] = None) -> int:
        where, params = self._team_filter(team_id, work_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total
                FROM attendance_days a
                JOIN users u ON u.user_id = a.user_id
                WHERE {where}
                """,
                params,
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def get_breaks(self, attendance_id: int) -> List[Break]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._load_breaks(cur, [attendance_id])[attendance_id]

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        coords: Coordinate,
        status: AttendanceStatus,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_days(user_id, work_date, check_in_time, check_in_lat, check_in_long, status)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (user_id, work_date, _to_db_time(check_in_time), coords.latitude, coords.longitude, status.value),
                )
                return int(cur.lastrowid)
        except Exception as e:
            if is_duplicate_key(e):
                raise DuplicateRecordError(f"Attendance for user {user_id} on {work_date} already exists") from e
            raise

    @staticmethod
    def _bump_version(cur, attendance_id: int, expected_version: int) -> bool:
        cur.execute(
            """
            UPDATE attendance_days
            SET version=version+1
            WHERE attendance_id=%s AND version=%s AND check_out_time IS NULL
            """,
            (attendance_id, expected_version),
        )
        return cur.rowcount > 0

    def add_break(
        self,
        *,
        attendance_id: int,
        expected_version: int,
        break_type: BreakType,
        duration_min: int,
        start_time: datetime,
    ) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            if not self._bump_version(cur, attendance_id, expected_version):
                return None
            cur.execute(
                """
                INSERT INTO breaks(attendance_id, type, duration_min, start_time)
                VALUES(%s,%s,%s,%s)
                """,
                (attendance_id, break_type.value, int(duration_min), _to_db_time(start_time)),
            )
            return int(cur.lastrowid)

    def close_break(
        self,
        *,
        attendance_id: int,
        expected_version: int,
        break_id: int,
        end_time: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (conn, cur):
            if not self._bump_version(cur, attendance_id, expected_version):
                return False
            cur.execute(
                """
                UPDATE breaks
                SET end_time=%s
                WHERE break_id=%s AND attendance_id=%s AND end_time IS NULL
                """,
                (_to_db_time(end_time), break_id, attendance_id),
            )
            if cur.rowcount == 0:
                # version matched but the break is gone or closed; undo the bump
                conn.rollback()
                return False
            return True

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_days
                SET check_out_time=%s, check_out_lat=%s, check_out_long=%s, status=%s,
                    work_done=%s, project_name=%s, meetings=%s, todo_updates=%s, notes=%s,
                    version=version+1
                WHERE attendance_id=%s AND version=%s AND check_out_time IS NULL
                """,
                (
                    _to_db_time(check_out_time),
                    coords.latitude,
                    coords.longitude,
                    status.value,
                    report.work_done,
                    report.project_name,
                    report.meetings,
                    report.todo_updates,
                    report.notes,
                    attendance_id,
                    expected_version,
                ),
            )
            return cur.rowcount > 0
