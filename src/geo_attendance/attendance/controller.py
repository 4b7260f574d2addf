from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Tuple

from flask import Flask, jsonify, request

from ..common.auth import current_role, current_user_id, login_required, role_required
from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_text
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_TEAM_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..geofence.model import Coordinate
from .model import AttendanceDay, Break, CheckOutReport, MemberAttendance


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def break_to_dict(b: Break) -> dict:
    return {
        "id": b.break_id,
        "type": b.type.value,
        "duration_min": b.duration_min,
        "start_time": _iso(b.start_time),
        "end_time": _iso(b.end_time),
    }


def day_to_dict(day: AttendanceDay) -> dict:
    return {
        "id": day.attendance_id,
        "date": day.work_date.isoformat(),
        "check_in_time": _iso(day.check_in_time),
        "check_out_time": _iso(day.check_out_time),
        "status": day.status.value,
        "state": day.state.value,
        "work_done": day.report.work_done,
        "project_name": day.report.project_name,
        "meetings": day.report.meetings,
        "todo_updates": day.report.todo_updates,
        "notes": day.report.notes,
        "breaks": [break_to_dict(b) for b in day.breaks],
    }


def member_to_dict(row: MemberAttendance) -> dict:
    data = day_to_dict(row.record)
    data["user_id"] = row.record.user_id
    data["full_name"] = row.full_name
    return data


def _paging(default_limit: int) -> Tuple[int, int]:
    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", default_limit, type=int)
    page = max(1, page or 1)
    limit = min(MAX_HISTORY_LIMIT, max(1, limit or default_limit))
    return page, limit


def _pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": (total + limit - 1) // limit,
    }


def _date_arg(name: str) -> Optional[date]:
    value = request.args.get(name)
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError("Invalid date. Use YYYY-MM-DD")


def _payload() -> dict:
    data: Any = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _coords(data: dict) -> Coordinate:
    # range and type checks happen in the geofence evaluator
    return Coordinate(data.get("latitude"), data.get("longitude"))


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def check_in():
        result = service.check_in(current_user_id(), _coords(_payload()))
        return jsonify({
            "success": True,
            "message": f"Checked in at {result.location_name}",
            "data": {
                "status": result.status.value,
                "location_name": result.location_name,
                "attendance": day_to_dict(result.record),
            },
        }), 201

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def check_out():
        data = _payload()
        report = CheckOutReport(
            work_done=optional_text(data.get("work_done")),
            project_name=optional_text(data.get("project_name")),
            meetings=optional_text(data.get("meetings")),
            todo_updates=optional_text(data.get("todo_updates")),
            notes=optional_text(data.get("notes")),
        )
        result = service.check_out(current_user_id(), _coords(data), report=report)
        return jsonify({
            "success": True,
            "message": "Checked out successfully",
            "data": {
                "status": result.status.value,
                "hours_worked": round(result.hours_worked, 2),
                "attendance": day_to_dict(result.record),
            },
        }), 200

    @app.route("/api/attendance/break/start", methods=["POST"], endpoint="attendance_break_start")
    @login_required
    def break_start():
        started = service.start_break(current_user_id(), _payload().get("type"))
        return jsonify({
            "success": True,
            "message": f"{started.type.value} break started ({started.duration_min} min)",
            "data": {
                "duration_min": started.duration_min,
                "start_time": _iso(started.start_time),
                "break": break_to_dict(started),
            },
        }), 201

    @app.route("/api/attendance/break/end", methods=["POST"], endpoint="attendance_break_end")
    @login_required
    def break_end():
        ended = service.end_break(current_user_id())
        return jsonify({
            "success": True,
            "message": "Break ended successfully",
            "data": {
                "end_time": _iso(ended.end_time),
                "break": break_to_dict(ended),
            },
        }), 200

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today():
        view = service.get_today(current_user_id())
        return jsonify({
            "success": True,
            "data": {
                "date": view.work_date.isoformat(),
                "state": view.state.value,
                "attendance": day_to_dict(view.record) if view.record else None,
            },
        }), 200

    @app.route("/api/attendance/self", methods=["GET"], endpoint="attendance_self")
    @login_required
    def history():
        page, limit = _paging(DEFAULT_HISTORY_LIMIT)
        rows, total = service.get_history(current_user_id(), page=page, limit=limit)
        return jsonify({
            "success": True,
            "data": {
                "attendance": [day_to_dict(r) for r in rows],
                "pagination": _pagination(page, limit, total),
            },
        }), 200

    @app.route("/api/attendance/team/<int:team_id>", methods=["GET"], endpoint="attendance_team")
    @role_required(Role.LEAD)
    def team_history(team_id: int):
        page, limit = _paging(DEFAULT_TEAM_HISTORY_LIMIT)
        rows, total = service.get_team_history(
            current_user_id(),
            current_role(),
            team_id,
            work_date=_date_arg("date"),
            page=page,
            limit=limit,
        )
        return jsonify({
            "success": True,
            "data": {
                "attendance": [member_to_dict(r) for r in rows],
                "pagination": _pagination(page, limit, total),
            },
        }), 200

    @app.route("/api/attendance/user/<int:user_id>", methods=["GET"], endpoint="attendance_user")
    @role_required(Role.LEAD)
    def user_history(user_id: int):
        page, limit = _paging(DEFAULT_HISTORY_LIMIT)
        rows, total = service.get_user_history(current_user_id(), current_role(), user_id, page=page, limit=limit)
        return jsonify({
            "success": True,
            "data": {
                "attendance": [day_to_dict(r) for r in rows],
                "pagination": _pagination(page, limit, total),
            },
        }), 200

    @app.route("/api/attendance/breaks/<int:attendance_id>", methods=["GET"], endpoint="attendance_breaks")
    @login_required
    def breaks(attendance_id: int):
        rows = service.get_breaks(current_user_id(), current_role(), attendance_id)
        return jsonify({
            "success": True,
            "data": {"breaks": [break_to_dict(b) for b in rows]},
        }), 200
