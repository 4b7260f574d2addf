from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Coordinate:
    """GPS point as reported by the client."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeoRegion:
    """Domain entity: an office site with a circular geofence.

    Note: radius_meters is kept in [1, 1000] by the location service and by
    a CHECK constraint in the schema.
    """

    id: str
    name: str
    latitude: float
    longitude: float
    radius_meters: int
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def center(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)
