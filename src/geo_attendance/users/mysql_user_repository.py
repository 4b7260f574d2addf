from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository


def _row_to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        role=Role(row["role"]),
        team_id=row.get("team_id"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, role, team_id, is_active
                FROM users
                WHERE user_id=%s
                """,
                (user_id,),
            )
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_active_by_role(self, role: Role) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, role, team_id, is_active
                FROM users
                WHERE role=%s AND is_active=1
                ORDER BY user_id ASC
                """,
                (role.value,),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def get_team_lead_id(self, team_id: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT lead_id FROM teams WHERE team_id=%s", (team_id,))
            row = fetchone(cur)
            if not row or row.get("lead_id") is None:
                return None
            return int(row["lead_id"])
