"""
Attendance notifications.

Routes check-in/check-out events to every active admin (unless the actor is
an admin) and to the actor's team lead. Delivery is best effort: failures are
logged and never raised to the attendance operation.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog

from ..core.enums import NotificationType, Role
from ..users.model import User
from ..users.repository import UserRepository
from .sender import NotificationSender

log = structlog.get_logger(__name__)


class AttendanceNotifier:
    def __init__(self, users: UserRepository, sender: NotificationSender):
        self._users = users
        self._sender = sender

    def checked_in(self, *, user_id: int, attendance_id: int, location_name: str) -> None:
        self._dispatch(
            user_id=user_id,
            attendance_id=attendance_id,
            event_type=NotificationType.ATTENDANCE_CHECKIN,
            admin_title="Attendance Check-in",
            admin_message="{name} checked in at {location}",
            lead_title="Team Member Check-in",
            lead_message="{name} checked in",
            fields={"location": location_name},
        )

    def checked_out(self, *, user_id: int, attendance_id: int, hours_worked: float) -> None:
        self._dispatch(
            user_id=user_id,
            attendance_id=attendance_id,
            event_type=NotificationType.ATTENDANCE_CHECKOUT,
            admin_title="Attendance Check-out",
            admin_message="{name} checked out. Worked: {hours:.1f} hrs.",
            lead_title="Team Member Check-out",
            lead_message="{name} checked out",
            fields={"hours": hours_worked},
        )

    def _dispatch(
        self,
        *,
        user_id: int,
        attendance_id: int,
        event_type: NotificationType,
        admin_title: str,
        admin_message: str,
        lead_title: str,
        lead_message: str,
        fields: Dict[str, Any],
    ) -> None:
        metadata = {"user_id": user_id, "attendance_id": attendance_id}
        try:
            actor = self._users.get_by_id(user_id)
            name = actor.full_name if actor else "User"

            if actor is None or actor.role != Role.ADMIN:
                for admin in self._admins(exclude=user_id):
                    self._send(admin.user_id, event_type, admin_title, admin_message.format(name=name, **fields), metadata)

            lead_id = self._lead_of(actor)
            if lead_id is not None and lead_id != user_id:
                self._send(lead_id, event_type, lead_title, lead_message.format(name=name, **fields), metadata)
        except Exception:
            log.exception("notification.routing_failed", user_id=user_id, event_type=event_type.value)

    def _admins(self, *, exclude: int) -> List[User]:
        return [u for u in self._users.list_active_by_role(Role.ADMIN) if u.user_id != exclude]

    def _lead_of(self, actor: Optional[User]) -> Optional[int]:
        if actor is None or actor.team_id is None:
            return None
        return self._users.get_team_lead_id(actor.team_id)

    def _send(
        self,
        recipient_id: int,
        event_type: NotificationType,
        title: str,
        message: str,
        metadata: Dict[str, Any],
    ) -> None:
        try:
            self._sender.send(
                user_id=recipient_id,
                event_type=event_type,
                title=title,
                message=message,
                metadata=metadata,
            )
        except Exception:
            log.exception("notification.failed", recipient_id=recipient_id, event_type=event_type.value)
