"""Domain exceptions raised by the service layer.

Each exception carries the HTTP status the API answers with; the Flask error
handler in ``src.utils.responses`` does the translation.
"""


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(DomainError):
    """Raised when input is missing, malformed or references something invalid."""

    status_code = 400


class ConflictError(DomainError):
    """Raised on uniqueness, state or concurrent-modification conflicts."""

    status_code = 400


class CapacityError(ConflictError):
    """Raised when a team is already at its maximum size."""


class ForbiddenError(DomainError):
    """Raised when the actor lacks permission for an operation."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when a resource does not exist."""

    status_code = 404


class MembershipNotFoundError(NotFoundError):
    """Raised when a user is not a member of the team being changed."""
