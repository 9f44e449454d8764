"""
Error taxonomy.
Services raise these; the app-level handler turns them into
{"success": false, "error_code", "message"} responses.
"""


class ApplicationError(Exception):
    """Base exception for all service errors."""
    status_code = 500
    error_code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message=None, **details):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    def to_dict(self):
        body = {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            body["details"] = self.details
        return body


class NotFound(ApplicationError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class Forbidden(ApplicationError):
    """Caller is authenticated but does not own the resource."""
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Access denied"


class Unauthorized(ApplicationError):
    """Caller lacks the admin capability."""
    status_code = 403
    error_code = "UNAUTHORIZED"
    default_message = "Admin capability required"


class UserIneligible(ApplicationError):
    status_code = 403
    error_code = "USER_INELIGIBLE"
    default_message = "User is not eligible to participate"


class InvalidState(ApplicationError):
    """Illegal transition, including double verification and lost races."""
    status_code = 409
    error_code = "INVALID_STATE"
    default_message = "Operation not allowed in the current state"


class AlreadyEnrolled(InvalidState):
    error_code = "ALREADY_ENROLLED"
    default_message = "You have already participated in this competition"


class CompetitionClosed(ApplicationError):
    status_code = 409
    error_code = "COMPETITION_CLOSED"
    default_message = "Competition is not accepting entries"


class NonMonotonicTimestamp(ApplicationError):
    status_code = 409
    error_code = "NON_MONOTONIC_TIMESTAMP"
    default_message = "effective_from must be later than the latest configuration version"


class NoConfiguration(ApplicationError):
    status_code = 409
    error_code = "NO_CONFIGURATION"
    default_message = "No sponsor bonus / TDS configuration is effective"


class ValidationError(ApplicationError):
    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class InvalidAmount(ValidationError):
    error_code = "INVALID_AMOUNT"
    default_message = "Invalid payment amount"


class InvalidRange(ValidationError):
    error_code = "INVALID_RANGE"
    default_message = "Percentages must be between 0 and 100 and sum to at most 100"


class InvalidConfiguration(ApplicationError):
    status_code = 422
    error_code = "INVALID_CONFIGURATION"
    default_message = "Configuration percentages are invalid"


class StoreUnavailable(ApplicationError):
    """Transient; callers may retry with backoff."""
    status_code = 503
    error_code = "STORE_UNAVAILABLE"
    default_message = "Storage is temporarily unavailable"


class Timeout(StoreUnavailable):
    error_code = "TIMEOUT"
    default_message = "Storage call timed out"
