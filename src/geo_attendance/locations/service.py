from __future__ import annotations

from typing import Any, List, Optional

import structlog

from ..common.validators import is_finite_number, require_non_empty
from ..core.constants import DEFAULT_RADIUS_METERS, MAX_RADIUS_METERS, MIN_RADIUS_METERS
from ..core.exceptions import InvalidCoordinate, NotFoundError, ValidationError
from ..geofence.evaluator import validate_coordinates
from ..geofence.model import GeoRegion
from .repository import LocationRepository

log = structlog.get_logger(__name__)


def _require_radius(value: Any) -> int:
    if not is_finite_number(value) or int(value) != value:
        raise ValidationError("Radius must be a whole number of meters")
    radius = int(value)
    if radius < MIN_RADIUS_METERS or radius > MAX_RADIUS_METERS:
        raise ValidationError(f"Radius must be between {MIN_RADIUS_METERS} and {MAX_RADIUS_METERS} meters")
    return radius


class LocationService:
    """Use cases: administer office locations used as geofences."""

    def __init__(self, locations: LocationRepository):
        self._locations = locations

    def list_active(self) -> List[GeoRegion]:
        return list(self._locations.list_active())

    def get(self, location_id: str) -> GeoRegion:
        region = self._locations.get_by_id(location_id)
        if not region:
            raise NotFoundError("Location not found")
        return region

    def create(
        self,
        *,
        name: str,
        latitude: Any,
        longitude: Any,
        radius_meters: Any = DEFAULT_RADIUS_METERS,
        actor_id: Optional[int] = None,
    ) -> GeoRegion:
        clean_name = require_non_empty(name, "Location name")
        if not validate_coordinates(latitude, longitude):
            raise InvalidCoordinate(
                "Invalid GPS coordinates. Latitude must be -90 to 90, Longitude must be -180 to 180."
            )
        radius = _require_radius(radius_meters)

        region = self._locations.create(
            name=clean_name,
            latitude=float(latitude),
            longitude=float(longitude),
            radius_meters=radius,
        )
        log.info("location.created", location_id=region.id, name=region.name, created_by=actor_id)
        return region

    def update(self, location_id: str, changes: dict, *, actor_id: Optional[int] = None) -> GeoRegion:
        self.get(location_id)

        update_data: dict = {}
        if changes.get("name") is not None:
            update_data["name"] = require_non_empty(changes["name"], "Location name")

        has_lat = changes.get("latitude") is not None
        has_lon = changes.get("longitude") is not None
        if has_lat or has_lon:
            if has_lat != has_lon:
                raise ValidationError("Both latitude and longitude must be provided together")
            if not validate_coordinates(changes["latitude"], changes["longitude"]):
                raise InvalidCoordinate("Invalid GPS coordinates")
            update_data["latitude"] = float(changes["latitude"])
            update_data["longitude"] = float(changes["longitude"])

        if changes.get("radius_meters") is not None:
            update_data["radius_meters"] = _require_radius(changes["radius_meters"])

        if not update_data:
            raise ValidationError("No fields to update")

        region = self._locations.update(location_id, update_data)
        if not region:
            raise NotFoundError("Location not found")
        log.info("location.updated", location_id=location_id, fields=sorted(update_data), updated_by=actor_id)
        return region

    def deactivate(self, location_id: str, *, actor_id: Optional[int] = None) -> None:
        region = self.get(location_id)
        if region.is_active:
            self._locations.deactivate(location_id)
        log.info("location.deactivated", location_id=location_id, deactivated_by=actor_id)
