"""Custom exception hierarchy."""

class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error


class APIClientError(AppError):
    """Raised when an external API call fails."""
    pass


class APITimeoutError(APIClientError):
    """Raised when an external API call times out."""
    pass


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class ValidationError(AppError):
    """Raised when input validation fails."""
    pass


class NotesRequiredError(ValidationError):
    """Raised when a review decision needs admin notes and none were given."""
    pass


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


class NotFoundError(AppError):
    """Raised when a requested record does not exist."""
    pass


class PermissionDeniedError(AppError):
    """Raised when the caller may not act on a record."""
    pass


class InvalidTransitionError(AppError):
    """Raised when a status or step change is not allowed from the current state."""

    def __init__(self, message: str, current: str = None, requested: str = None):
        super().__init__(message)
        self.current = current
        self.requested = requested


class PhaseLockedError(InvalidTransitionError):
    """Raised when a phase is written before the previous phase is completed."""
    pass
