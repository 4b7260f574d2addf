from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles, ordered from most to least privileged."""

    ADMIN = "ADMIN"
    LEAD = "LEAD"
    EMPLOYEE = "EMPLOYEE"

    @property
    def level(self) -> int:
        return {Role.ADMIN: 3, Role.LEAD: 2, Role.EMPLOYEE: 1}[self]

    def at_least(self, other: "Role") -> bool:
        return self.level >= other.level


class AttendanceStatus(str, Enum):
    """Classification stored on an attendance day."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    HALF_DAY = "HALF_DAY"


class BreakType(str, Enum):
    WALKING = "WALKING"
    TEA = "TEA"
    LUNCH = "LUNCH"

    @property
    def duration_min(self) -> int:
        return BREAK_DURATION_MINUTES[self]


BREAK_DURATION_MINUTES = {
    BreakType.WALKING: 5,
    BreakType.TEA: 15,
    BreakType.LUNCH: 60,
}


class AttendanceState(str, Enum):
    """Lifecycle of one user's attendance on one calendar date."""

    NOT_CHECKED_IN = "NOT_CHECKED_IN"
    CHECKED_IN = "CHECKED_IN"
    ON_BREAK = "ON_BREAK"
    CHECKED_OUT = "CHECKED_OUT"


class NotificationType(str, Enum):
    ATTENDANCE_CHECKIN = "ATTENDANCE_CHECKIN"
    ATTENDANCE_CHECKOUT = "ATTENDANCE_CHECKOUT"
