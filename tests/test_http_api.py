from __future__ import annotations

import pytest

from geo_attendance.container import assemble
from geo_attendance.main import create_app


@pytest.fixture
def client(monkeypatch, attendance_repo, locations_repo, users_repo, sender, policy):
    monkeypatch.setenv("APP_ENV", "testing")
    container = assemble(
        users_repo=users_repo,
        locations_repo=locations_repo,
        attendance_repo=attendance_repo,
        notification_sender=sender,
        policy=policy,
    )
    app = create_app(container=container)
    return app.test_client()


def login(client, user_id=1, role="EMPLOYEE"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def test_requires_session(client):
    resp = client.get("/api/attendance/today")

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "Authentication required", "code": "unauthenticated"}


def test_today_before_check_in(client):
    login(client)

    body = client.get("/api/attendance/today").get_json()

    assert body["success"] is True
    assert body["data"]["state"] == "NOT_CHECKED_IN"
    assert body["data"]["attendance"] is None


def test_check_in_flow(client, at_hq):
    login(client)

    resp = client.post("/api/attendance/check-in", json={"latitude": at_hq.latitude, "longitude": at_hq.longitude})

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["location_name"] == "HQ"
    assert data["status"] in {"PRESENT", "LATE", "HALF_DAY"}
    assert data["attendance"]["state"] == "CHECKED_IN"
    assert resp.headers["X-Request-ID"]

    again = client.post("/api/attendance/check-in", json={"latitude": at_hq.latitude, "longitude": at_hq.longitude})
    assert again.status_code == 400
    assert again.get_json()["code"] == "already_checked_in"


def test_check_in_missing_coordinates(client):
    login(client)

    resp = client.post("/api/attendance/check-in", json={})

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid_coordinate"


def test_check_in_outside_geofence(client, far_away):
    login(client)

    resp = client.post("/api/attendance/check-in", json={"latitude": far_away.latitude, "longitude": far_away.longitude})

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "outside_geofence"


def test_break_and_check_out_flow(client, at_hq):
    login(client)
    coords = {"latitude": at_hq.latitude, "longitude": at_hq.longitude}
    client.post("/api/attendance/check-in", json=coords)

    started = client.post("/api/attendance/break/start", json={"type": "walking"})
    assert started.status_code == 201
    assert started.get_json()["data"]["duration_min"] == 5

    blocked = client.post("/api/attendance/check-out", json=coords)
    assert blocked.get_json()["code"] == "break_still_active"

    ended = client.post("/api/attendance/break/end")
    assert ended.status_code == 200
    assert ended.get_json()["data"]["break"]["end_time"] is not None


def test_invalid_break_type(client):
    login(client)

    resp = client.post("/api/attendance/break/start", json={"type": "SIESTA"})

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid_break_type"


def test_history_pagination_shape(client):
    login(client)

    body = client.get("/api/attendance/self?page=0&limit=500").get_json()

    assert body["data"]["attendance"] == []
    assert body["data"]["pagination"] == {"page": 1, "limit": 100, "total": 0, "total_pages": 0}


def test_list_locations(client):
    login(client)

    names = [loc["name"] for loc in client.get("/api/locations").get_json()["data"]["locations"]]

    assert sorted(names) == ["Annex", "HQ"]


def test_employee_cannot_create_location(client):
    login(client)

    resp = client.post("/api/locations", json={"name": "Branch", "latitude": 1.0, "longitude": 1.0})

    assert resp.status_code == 403


def test_admin_manages_locations(client):
    login(client, user_id=3, role="ADMIN")

    created = client.post("/api/locations", json={"name": "Branch", "latitude": 1.0, "longitude": 1.0})
    assert created.status_code == 201
    location = created.get_json()["data"]["location"]
    assert location["radius_meters"] == 50

    patched = client.patch(f"/api/locations/{location['id']}", json={"radius_meters": 120})
    assert patched.get_json()["data"]["location"]["radius_meters"] == 120

    assert client.delete(f"/api/locations/{location['id']}").status_code == 200
    assert client.delete("/api/locations/missing").status_code == 404


def test_unknown_route_is_404(client):
    login(client)

    assert client.get("/api/nothing-here").status_code == 404


def _check_in_employee(client, at_hq):
    login(client, user_id=1)
    resp = client.post("/api/attendance/check-in", json={"latitude": at_hq.latitude, "longitude": at_hq.longitude})
    return resp.get_json()["data"]["attendance"]["id"]


def test_employee_cannot_view_team(client):
    login(client, user_id=1, role="EMPLOYEE")

    resp = client.get("/api/attendance/team/7")

    assert resp.status_code == 403
    assert resp.get_json()["code"] == "forbidden"


def test_lead_cannot_view_another_team(client):
    login(client, user_id=2, role="LEAD")

    resp = client.get("/api/attendance/team/8")

    assert resp.status_code == 403
    assert resp.get_json()["error"] == "You can only view attendance for your own team"


def test_lead_views_own_team(client, at_hq):
    _check_in_employee(client, at_hq)
    login(client, user_id=2, role="LEAD")

    body = client.get("/api/attendance/team/7").get_json()

    assert body["data"]["pagination"] == {"page": 1, "limit": 50, "total": 1, "total_pages": 1}
    row = body["data"]["attendance"][0]
    assert (row["user_id"], row["full_name"]) == (1, "Asha Rao")
    assert row["state"] == "CHECKED_IN"


def test_team_date_filter_must_be_iso(client):
    login(client, user_id=3, role="ADMIN")

    resp = client.get("/api/attendance/team/7?date=02-03-2026")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid date. Use YYYY-MM-DD"


def test_team_date_filter_with_no_rows(client, at_hq):
    _check_in_employee(client, at_hq)
    login(client, user_id=3, role="ADMIN")

    body = client.get("/api/attendance/team/7?date=2001-01-01").get_json()

    assert body["data"]["attendance"] == []
    assert body["data"]["pagination"]["total"] == 0


def test_lead_views_member_history(client, at_hq):
    _check_in_employee(client, at_hq)
    login(client, user_id=2, role="LEAD")

    body = client.get("/api/attendance/user/1").get_json()

    assert body["data"]["pagination"]["total"] == 1
    assert body["data"]["pagination"]["limit"] == 30
    assert client.get("/api/attendance/user/3").status_code == 403


def test_breaks_endpoint(client, at_hq):
    attendance_id = _check_in_employee(client, at_hq)
    client.post("/api/attendance/break/start", json={"type": "TEA"})

    own = client.get(f"/api/attendance/breaks/{attendance_id}").get_json()
    assert [b["type"] for b in own["data"]["breaks"]] == ["TEA"]

    login(client, user_id=3, role="ADMIN")
    assert client.get(f"/api/attendance/breaks/{attendance_id}").status_code == 200
    missing = client.get("/api/attendance/breaks/999")
    assert missing.status_code == 404
    assert missing.get_json()["code"] == "not_found"
