from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class ConflictError(DomainError):
    """Raised when a write collides with a record that already exists."""


class GeofenceError(ValidationError):
    """Raised when a check-in position is outside the event radius."""

    def __init__(self, message: str, *, distance_meters: float | None = None, radius_meters: float | None = None):
        super().__init__(message)
        self.distance_meters = distance_meters
        self.radius_meters = radius_meters


class IntegrationError(DomainError):
    """Raised when an outside service (mail, push, AI, sheets) fails."""
