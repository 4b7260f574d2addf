"""
Geofence evaluation.

Pure functions: no I/O and no logging. Callers log rejected attempts.
"""
from __future__ import annotations

import math
from typing import Any, List, Optional, Sequence, Tuple

from ..common.validators import is_finite_number
from ..core.constants import BYPASS_REGION_ID, BYPASS_REGION_NAME, EARTH_RADIUS_METERS, MAX_RADIUS_METERS
from ..core.exceptions import InvalidCoordinate
from .model import Coordinate, GeoRegion


def validate_coordinates(latitude: Any, longitude: Any) -> bool:
    """
    Check that a latitude/longitude pair is usable.

    Latitude: -90 to 90
    Longitude: -180 to 180
    Both must be finite numbers.
    """
    if not is_finite_number(latitude) or not is_finite_number(longitude):
        return False
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def require_valid(point: Coordinate) -> Coordinate:
    if not validate_coordinates(point.latitude, point.longitude):
        raise InvalidCoordinate()
    return point


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> int:
    """
    Calculate the great circle distance between two points on Earth.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in meters, rounded to the nearest meter
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2 +
        math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    # rounding can push a just past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    # round half up, matching how distances are reported to users
    return int(math.floor(EARTH_RADIUS_METERS * c + 0.5))


def distance_to(point: Coordinate, region: GeoRegion) -> int:
    return haversine_distance(point.latitude, point.longitude, region.latitude, region.longitude)


def locate(point: Coordinate, regions: Sequence[GeoRegion]) -> Optional[GeoRegion]:
    """
    Find the region containing ``point``.

    Regions are tried in the order given and the first containing region
    wins, even when a later region's center is closer. Inactive regions are
    skipped.

    Raises:
        InvalidCoordinate: If the point is out of range or not a finite number
    """
    require_valid(point)

    for region in regions:
        if not region.is_active:
            continue
        if distance_to(point, region) <= region.radius_meters:
            return region

    return None


def nearest_regions(point: Coordinate, regions: Sequence[GeoRegion], limit: int) -> List[Tuple[str, int]]:
    """Names and distances of the closest active regions, nearest first."""
    ranked = sorted(
        ((region.name, distance_to(point, region)) for region in regions if region.is_active),
        key=lambda item: item[1],
    )
    return ranked[: max(0, int(limit))]


def bypass_region(regions: Sequence[GeoRegion]) -> GeoRegion:
    """Region substituted for a failed match when geofencing is disabled."""
    for region in regions:
        if region.is_active:
            return region
    return GeoRegion(
        id=BYPASS_REGION_ID,
        name=BYPASS_REGION_NAME,
        latitude=0.0,
        longitude=0.0,
        radius_meters=MAX_RADIUS_METERS,
    )
