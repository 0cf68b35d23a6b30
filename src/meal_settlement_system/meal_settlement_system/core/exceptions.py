class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced child or cancellation does not exist."""


class AuthenticationError(DomainError):
    """Raised when the caller is missing or carries an unknown role."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class DeadlinePassedError(DomainError):
    """Raised when the daily meal cutoff for a date has already passed."""


class ConflictError(DomainError):
    """Raised when the same meal was already cancelled for that child and day."""
