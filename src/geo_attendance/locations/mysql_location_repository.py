from __future__ import annotations

import uuid
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from ..geofence.model import GeoRegion
from .repository import LocationRepository

_UPDATABLE = ("name", "latitude", "longitude", "radius_meters")


def _row_to_region(r: Dict[str, Any]) -> GeoRegion:
    return GeoRegion(
        id=str(r["location_id"]),
        name=r["name"],
        latitude=as_float(r["latitude"]),
        longitude=as_float(r["longitude"]),
        radius_meters=int(r["radius_meters"]),
        is_active=bool(r.get("is_active", True)),
        created_at=r.get("created_at"),
    )


class MySQLLocationRepository(LocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self) -> Sequence[GeoRegion]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT location_id, name, latitude, longitude, radius_meters, is_active, created_at
                FROM locations
                WHERE is_active=1
                ORDER BY name ASC, location_id ASC
                """
            )
            return [_row_to_region(r) for r in fetchall(cur)]

    def get_by_id(self, location_id: str) -> Optional[GeoRegion]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT location_id, name, latitude, longitude, radius_meters, is_active, created_at
                FROM locations
                WHERE location_id=%s
                """,
                (location_id,),
            )
            r = fetchone(cur)
            return _row_to_region(r) if r else None

    def create(self, *, name: str, latitude: float, longitude: float, radius_meters: int) -> GeoRegion:
        location_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO locations(location_id, name, latitude, longitude, radius_meters)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (location_id, name, latitude, longitude, int(radius_meters)),
            )
        created = self.get_by_id(location_id)
        assert created is not None
        return created

    def update(self, location_id: str, changes: dict) -> Optional[GeoRegion]:
        fields = [k for k in _UPDATABLE if k in changes]
        if fields:
            assignments = ", ".join(f"{k}=%s" for k in fields)
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE locations SET {assignments} WHERE location_id=%s",
                    tuple(changes[k] for k in fields) + (location_id,),
                )
        return self.get_by_id(location_id)

    def deactivate(self, location_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE locations SET is_active=0 WHERE location_id=%s",
                (location_id,),
            )
            return cur.rowcount > 0
