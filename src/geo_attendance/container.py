from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.policy import TimeClassificationConfig
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DatabaseConnection, DBConfig
from .locations.mysql_location_repository import MySQLLocationRepository
from .locations.repository import LocationRepository
from .locations.service import LocationService
from .notifications.mysql_notification_sender import MySQLNotificationSender
from .notifications.notifier import AttendanceNotifier
from .notifications.sender import LoggingNotificationSender, NotificationSender
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    locations_repo: LocationRepository
    attendance_repo: AttendanceRepository
    notification_sender: NotificationSender

    attendance_service: AttendanceService
    location_service: LocationService


def assemble(
    *,
    users_repo: UserRepository,
    locations_repo: LocationRepository,
    attendance_repo: AttendanceRepository,
    notification_sender: NotificationSender,
    policy: TimeClassificationConfig,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services from already-built repositories."""
    notifier = AttendanceNotifier(users_repo, notification_sender)
    attendance_service = AttendanceService(
        attendance_repo,
        locations_repo,
        policy,
        notifier=notifier,
        users=users_repo,
    )
    location_service = LocationService(locations_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        locations_repo=locations_repo,
        attendance_repo=attendance_repo,
        notification_sender=notification_sender,
        attendance_service=attendance_service,
        location_service=location_service,
    )


def build_container(
    *,
    db_config: dict,
    policy: TimeClassificationConfig,
    notification_store: str = "mysql",
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    sender: NotificationSender
    if notification_store == "log":
        sender = LoggingNotificationSender()
    else:
        sender = MySQLNotificationSender(conn)

    return assemble(
        users_repo=MySQLUserRepository(conn),
        locations_repo=MySQLLocationRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        notification_sender=sender,
        policy=policy,
        conn=conn,
    )
