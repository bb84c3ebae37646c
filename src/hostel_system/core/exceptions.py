class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or no one is signed in."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when the addressed entity does not exist."""


class DuplicateCheckInError(ValidationError):
    """Today's record already carries a check-in time."""


class NoCheckInError(ValidationError):
    """Check-out attempted without a check-in for today."""


class DuplicateCheckOutError(ValidationError):
    """Today's record already carries a check-out time."""


class AttendanceLockedError(ValidationError):
    """Staff already assigned a terminal status for the day."""
