"""
Domain errors. Each carries a snake_case code (str(e) == code, like the ValueError codes
used across services) and the HTTP status the API maps it to.
"""
from fastapi import status


class DomainError(ValueError):
    """Base for errors raised before any state mutation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request rejected"

    def __init__(self, code: str, detail: str | None = None):
        super().__init__(code)
        self.code = code
        self.detail = detail or self.default_detail


class PolicyViolation(DomainError):
    """Event policy forbids the action (guestbook disabled, downloads disallowed, ...)."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not allowed for this event"


class NotFound(DomainError):
    """Unknown (or not visible to the caller) event / item / comment."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class OwnershipDenied(DomainError):
    """Admin action attempted by someone who is not host, photographer or admin."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied to this event"


class ValidationFailure(DomainError):
    """Malformed input caught after schema validation (empty name, bad mime type, ...)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation failed"


class AuthenticationRequired(DomainError):
    """Endpoint needs a resolved principal (X-User-ID / X-User-Role)."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class EventPasswordRequired(DomainError):
    """Password-protected event reached without the right X-Event-Password."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Event password required"
