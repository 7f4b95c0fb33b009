class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InactivePassError(ValidationError):
    """Raised when a pass exists but is no longer active."""


class AuthorizationError(DomainError):
    """Raised when the supplied admin password does not match."""


class NotFoundError(DomainError):
    """Raised when a pass or VIP access code does not exist."""


class DuplicateKeyError(Exception):
    """Raised by repositories when the store rejects a duplicate unique key."""
