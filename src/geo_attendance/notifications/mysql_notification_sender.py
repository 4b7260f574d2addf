from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .sender import NotificationSender


class MySQLNotificationSender(NotificationSender):
    """Stores notifications in the user's inbox table."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def send(
        self,
        *,
        user_id: int,
        event_type: NotificationType,
        title: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(user_id, type, title, message, data)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    event_type.value,
                    title,
                    message,
                    json.dumps(metadata, default=str) if metadata else None,
                ),
            )
