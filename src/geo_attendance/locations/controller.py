from __future__ import annotations

from typing import Any

from flask import Flask, jsonify, request

from ..common.auth import current_user_id, login_required, role_required
from ..container import Container
from ..core.constants import DEFAULT_RADIUS_METERS
from ..core.enums import Role
from ..geofence.model import GeoRegion


def location_to_dict(region: GeoRegion) -> dict:
    return {
        "id": region.id,
        "name": region.name,
        "latitude": region.latitude,
        "longitude": region.longitude,
        "radius_meters": region.radius_meters,
        "is_active": region.is_active,
        "created_at": region.created_at.isoformat() if region.created_at else None,
    }


def _payload() -> dict:
    data: Any = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register(app: Flask, container: Container) -> None:
    service = container.location_service

    @app.route("/api/locations", methods=["GET"], endpoint="locations_list")
    @login_required
    def list_locations():
        return jsonify({
            "success": True,
            "data": {"locations": [location_to_dict(r) for r in service.list_active()]},
        }), 200

    @app.route("/api/locations", methods=["POST"], endpoint="locations_create")
    @role_required(Role.ADMIN)
    def create_location():
        data = _payload()
        region = service.create(
            name=data.get("name", ""),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            radius_meters=data.get("radius_meters", DEFAULT_RADIUS_METERS),
            actor_id=current_user_id(),
        )
        return jsonify({
            "success": True,
            "message": "Location created successfully",
            "data": {"location": location_to_dict(region)},
        }), 201

    @app.route("/api/locations/<location_id>", methods=["PATCH"], endpoint="locations_update")
    @role_required(Role.ADMIN)
    def update_location(location_id: str):
        region = service.update(location_id, _payload(), actor_id=current_user_id())
        return jsonify({
            "success": True,
            "message": "Location updated successfully",
            "data": {"location": location_to_dict(region)},
        }), 200

    @app.route("/api/locations/<location_id>", methods=["DELETE"], endpoint="locations_delete")
    @role_required(Role.ADMIN)
    def delete_location(location_id: str):
        service.deactivate(location_id, actor_id=current_user_id())
        return jsonify({"success": True, "message": "Location deleted successfully"}), 200
