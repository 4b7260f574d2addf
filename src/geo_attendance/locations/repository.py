from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..geofence.model import GeoRegion


class LocationRepository(Protocol):
    """Storage contract for office locations (geofences).

    Locations are never hard-deleted; ``deactivate`` clears ``is_active``.
    """

    def list_active(self) -> Sequence[GeoRegion]:
        """Active locations in a stable order (by name, then id)."""
        raise NotImplementedError

    def get_by_id(self, location_id: str) -> Optional[GeoRegion]:
        raise NotImplementedError

    def create(self, *, name: str, latitude: float, longitude: float, radius_meters: int) -> GeoRegion:
        raise NotImplementedError

    def update(self, location_id: str, changes: dict) -> Optional[GeoRegion]:
        raise NotImplementedError

    def deactivate(self, location_id: str) -> bool:
        raise NotImplementedError
