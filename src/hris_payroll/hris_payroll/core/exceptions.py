class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class ReasonRequired(ValidationError):
    code = "REASON_REQUIRED"


class AuthenticationError(DomainError):
    """Raised when the caller cannot be identified."""

    code = "AUTHENTICATION_REQUIRED"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"


class NotFoundError(DomainError):
    code = "NOT_FOUND"


class PolicyViolation(DomainError):
    """Business-rule rejection; nothing has been written."""

    code = "POLICY_VIOLATION"


class SubscriptionExpired(PolicyViolation):
    code = "SUBSCRIPTION_EXPIRED"


class OutOfRange(PolicyViolation):
    code = "OUT_OF_RANGE"

    def __init__(self, message: str, *, distance_m: float, radius_m: float):
        super().__init__(message)
        self.distance_m = distance_m
        self.radius_m = radius_m


class NonWorkingDay(PolicyViolation):
    code = "NON_WORKING_DAY"


class OverlappingRequest(PolicyViolation):
    code = "OVERLAPPING_REQUEST"


class InsufficientBalance(PolicyViolation):
    code = "INSUFFICIENT_BALANCE"


class NoWorkingDays(PolicyViolation):
    code = "NO_WORKING_DAYS"


class AlreadyClockedIn(PolicyViolation):
    code = "ALREADY_CLOCKED_IN"


class AlreadyClockedOut(PolicyViolation):
    code = "ALREADY_CLOCKED_OUT"


class NoClockInFound(PolicyViolation):
    code = "NO_CLOCK_IN_FOUND"


class ConflictingLeaveStatus(PolicyViolation):
    code = "CONFLICTING_LEAVE_STATUS"


class StateConflict(DomainError):
    """The current state of a record forbids the operation."""

    code = "STATE_CONFLICT"


class PayrollLocked(StateConflict):
    code = "PAYROLL_LOCKED"


class AlreadyProcessed(StateConflict):
    code = "ALREADY_PROCESSED"


class CannotDeletePaid(StateConflict):
    code = "CANNOT_DELETE_PAID"


class InvalidTransition(StateConflict):
    code = "INVALID_TRANSITION"
