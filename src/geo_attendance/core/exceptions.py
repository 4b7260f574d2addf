class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"
    default_message = "Request violates a business rule"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"
    default_message = "Invalid input"


class InvalidCoordinate(ValidationError):
    code = "invalid_coordinate"
    default_message = "Invalid GPS coordinates. Please enable location services."


class InvalidBreakType(ValidationError):
    code = "invalid_break_type"
    default_message = "Invalid break type. Must be WALKING, TEA, or LUNCH."


class InvalidTimestamp(ValidationError):
    code = "invalid_timestamp"
    default_message = "Timestamp is earlier than the event it closes"


class ConflictError(DomainError):
    """Raised when the request conflicts with the current attendance state."""

    code = "conflict"
    default_message = "Request conflicts with current state"


class AlreadyCheckedIn(ConflictError):
    code = "already_checked_in"
    default_message = "You have already checked in today"


class AlreadyCheckedOut(ConflictError):
    code = "already_checked_out"
    default_message = "You have already checked out today"


class BreakAlreadyActive(ConflictError):
    code = "break_already_active"
    default_message = "You already have an active break. Please end it first."


class LunchAlreadyTaken(ConflictError):
    code = "lunch_already_taken"
    default_message = "Lunch break already taken today."


class BreakStillActive(ConflictError):
    code = "break_still_active"
    default_message = "You are currently on a break. Please end your break before checking out."


class ConcurrentUpdate(ConflictError):
    code = "concurrent_update"
    default_message = "Attendance record changed while saving. Please retry."


class PreconditionError(DomainError):
    code = "precondition_failed"
    default_message = "Operation is not allowed in the current state"


class NotCheckedIn(PreconditionError):
    code = "not_checked_in"
    default_message = "You have not checked in today. Please check in first."


class NoActiveBreak(PreconditionError):
    code = "no_active_break"
    default_message = "No active break to end."


class ConfigurationError(DomainError):
    """Raised when the system is missing setup an administrator must provide."""

    code = "configuration_error"
    default_message = "System is not configured"


class NoLocationsConfigured(ConfigurationError):
    code = "no_locations_configured"
    default_message = "No office locations configured. Contact admin."


class GeofenceError(DomainError):
    code = "geofence_error"
    default_message = "Location rejected"


class OutsideGeofence(GeofenceError):
    code = "outside_geofence"
    default_message = "You are not within any office location. Please move closer to check in."


class NotFoundError(DomainError):
    code = "not_found"
    default_message = "Resource not found"


class AuthenticationError(DomainError):
    """Raised when the caller has no identity."""

    code = "unauthenticated"
    default_message = "Authentication required"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"
    default_message = "You do not have permission for this action"


class DuplicateRecordError(DomainError):
    """Raised by repositories when a uniqueness constraint rejects a write."""

    code = "duplicate_record"
    default_message = "Record already exists"
