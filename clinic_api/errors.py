"""Error taxonomy shared by services and routes."""


class SchedulingError(Exception):
    """Base exception for clinic API operations."""


class NotFound(SchedulingError):
    """Raised when a referenced record does not resolve."""

    def __init__(self, kind: str, *ids: str, message: str | None = None):
        self.kind = kind
        self.ids = ids
        super().__init__(message or f"{kind} not found")


class ValidationFailure(SchedulingError):
    """Raised when a well-formed request breaks a business rule."""

    INVALID_REQUEST = "invalid_request"
    INVALID_DATE = "invalid_date"
    INVALID_DURATION = "invalid_duration"
    INVALID_TIME_FORMAT = "invalid_time_format"
    INVALID_TIME_RANGE = "invalid_time_range"
    INVALID_DAY = "invalid_day"
    OUTSIDE_CLINIC_HOURS = "outside_clinic_hours"
    OUTSIDE_WORK_SHIFT = "outside_work_shift"
    DOCTOR_CONFLICT = "doctor_conflict"
    PATIENT_CONFLICT = "patient_conflict"
    WORK_SHIFT_CONFLICT = "work_shift_conflict"
    INVALID_STATUS = "invalid_status"
    INVALID_TRANSITION = "invalid_transition"
    ALREADY_ATTENDING = "already_attending"
    ALREADY_EXISTS = "already_exists"
    IN_USE = "in_use"
    BOOKING_IN_PROGRESS = "booking_in_progress"

    def __init__(self, reason: str, message: str):
        self.reason = reason
        self.message = message
        super().__init__(message)


class StorageError(SchedulingError):
    """Raised when the persistence layer fails unexpectedly."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Storage failure during {operation}")


class AuthError(SchedulingError):
    """Raised when a request carries no valid credentials."""

    def __init__(self, message: str, status_code: int = 401):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
