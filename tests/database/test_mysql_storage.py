from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from geo_attendance.attendance.model import CheckOutReport
from geo_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from geo_attendance.core.enums import AttendanceStatus, BreakType
from geo_attendance.core.exceptions import DuplicateRecordError
from geo_attendance.database.bootstrap import SCHEMA_PATH, _strip_comments, iter_sql_statements
from geo_attendance.database.connection import DBConfig
from geo_attendance.database.mysql_base import is_duplicate_key
from geo_attendance.geofence.model import Coordinate


class FakeCursor:
    def __init__(self, error=None, rowcount=1, results=()):
        self._error = error
        self._results = list(results)
        self.rowcount = rowcount
        self.lastrowid = 42
        self.executed = []

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self._error:
            raise self._error

    def fetchall(self):
        return self._results.pop(0) if self._results else []

    def fetchone(self):
        rows = self.fetchall()
        return rows[0] if rows else None

    def close(self):
        pass


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=False):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, cursor):
        self.connection = FakeConnection(cursor)

    def connect(self, *, with_database=True):
        return self.connection


def _checkin(repo):
    return repo.create_checkin(
        user_id=1,
        work_date=date(2026, 3, 2),
        check_in_time=datetime(2026, 3, 2, 9, 30, tzinfo=timezone(timedelta(hours=5, minutes=30))),
        coords=Coordinate(12.97, 77.59),
        status=AttendanceStatus.PRESENT,
    )


def test_create_checkin_stores_naive_utc():
    cursor = FakeCursor()
    factory = FakeConnectionFactory(cursor)

    assert _checkin(MySQLAttendanceRepository(factory)) == 42

    _, params = cursor.executed[0]
    assert params[2] == datetime(2026, 3, 2, 4, 0)
    assert params[5] == "PRESENT"
    assert factory.connection.committed


def test_unique_violation_becomes_duplicate_record():
    error = IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    factory = FakeConnectionFactory(FakeCursor(error=error))

    with pytest.raises(DuplicateRecordError):
        _checkin(MySQLAttendanceRepository(factory))
    assert factory.connection.rolled_back


def test_other_integrity_errors_propagate():
    error = IntegrityError(msg="FK fails", errno=errorcode.ER_NO_REFERENCED_ROW_2)

    assert not is_duplicate_key(error)
    with pytest.raises(IntegrityError):
        _checkin(MySQLAttendanceRepository(FakeConnectionFactory(FakeCursor(error=error))))


def test_stale_version_write_is_reported():
    repo = MySQLAttendanceRepository(FakeConnectionFactory(FakeCursor(rowcount=0)))

    assert repo.update_checkout(
        attendance_id=1,
        expected_version=3,
        check_out_time=datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc),
        coords=Coordinate(12.97, 77.59),
        status=AttendanceStatus.PRESENT,
        report=CheckOutReport(),
    ) is False


def test_add_break_returns_new_break_id():
    cursor = FakeCursor()
    repo = MySQLAttendanceRepository(FakeConnectionFactory(cursor))

    break_id = repo.add_break(
        attendance_id=7,
        expected_version=2,
        break_type=BreakType.TEA,
        duration_min=15,
        start_time=datetime(2026, 3, 2, 11, 0, tzinfo=timezone.utc),
    )

    assert break_id == 42
    assert cursor.executed[0][1] == (7, 2)
    assert cursor.executed[1][1] == (7, "TEA", 15, datetime(2026, 3, 2, 11, 0))


def test_add_break_on_stale_version_returns_none():
    cursor = FakeCursor(rowcount=0)
    repo = MySQLAttendanceRepository(FakeConnectionFactory(cursor))

    assert repo.add_break(
        attendance_id=7,
        expected_version=1,
        break_type=BreakType.TEA,
        duration_min=15,
        start_time=datetime(2026, 3, 2, 11, 0, tzinfo=timezone.utc),
    ) is None
    assert len(cursor.executed) == 1


def _day_row(**overrides):
    row = {
        "attendance_id": 5,
        "user_id": 1,
        "work_date": date(2026, 3, 2),
        "check_in_time": datetime(2026, 3, 2, 9, 30),
        "check_in_lat": "12.9716000",
        "check_in_long": "77.5946000",
        "check_out_time": None,
        "check_out_lat": None,
        "check_out_long": None,
        "status": "PRESENT",
        "work_done": None,
        "project_name": None,
        "meetings": None,
        "todo_updates": None,
        "notes": None,
        "version": 2,
    }
    row.update(overrides)
    return row


def test_team_query_joins_members_and_attaches_breaks():
    break_row = {
        "break_id": 9,
        "attendance_id": 5,
        "type": "LUNCH",
        "duration_min": 60,
        "start_time": datetime(2026, 3, 2, 13, 0),
        "end_time": None,
    }
    cursor = FakeCursor(results=[[_day_row(full_name="Asha Rao")], [break_row]])
    repo = MySQLAttendanceRepository(FakeConnectionFactory(cursor))

    rows = repo.get_recent_for_team(7, 50, 0, work_date=date(2026, 3, 2))

    sql, params = cursor.executed[0]
    assert "JOIN users u" in sql and "a.work_date=%s" in sql
    assert params == (7, date(2026, 3, 2), 50, 0)
    assert rows[0].full_name == "Asha Rao"
    assert rows[0].record.check_in_time == datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)
    assert [b.break_id for b in rows[0].record.breaks] == [9]


def test_team_count_without_date_filter():
    cursor = FakeCursor(results=[[{"total": 3}]])

    assert MySQLAttendanceRepository(FakeConnectionFactory(cursor)).count_for_team(7) == 3
    sql, params = cursor.executed[0]
    assert "work_date" not in sql
    assert params == (7,)


def test_missing_day_by_id_is_none():
    assert MySQLAttendanceRepository(FakeConnectionFactory(FakeCursor())).get_by_id(99) is None


def test_sql_splitter_keeps_quoted_semicolons():
    sql = "INSERT INTO t VALUES('a;b'); SELECT 1;\n"

    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES('a;b')", "SELECT 1"]


def test_schema_defines_core_tables():
    statements = list(iter_sql_statements(_strip_comments(SCHEMA_PATH.read_text(encoding="utf-8"))))
    creates = " ".join(s for s in statements if s.upper().startswith("CREATE TABLE"))

    for table in ("users", "locations", "attendance_days", "breaks", "notifications"):
        assert f"CREATE TABLE IF NOT EXISTS {table}" in creates
    assert "uq_user_date" in creates


def test_db_config_defaults():
    cfg = DBConfig.from_dict({"host": "db", "port": "3307"})

    assert (cfg.host, cfg.port, cfg.database) == ("db", 3307, "geo_attendance")
