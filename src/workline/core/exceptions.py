from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    ``status_code`` is the HTTP status controllers answer with and ``reason``
    is the machine-readable code clients switch on.
    """

    status_code = 400
    default_reason = "error"

    def __init__(self, message: str, *, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason or self.default_reason


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    default_reason = "validation_error"


class AuthenticationError(DomainError):
    """Raised when the bearer token is missing or invalid."""

    status_code = 401
    default_reason = "unauthenticated"


class AuthorizationError(DomainError):
    """Raised when a principal lacks permission for an action."""

    status_code = 403
    default_reason = "forbidden"


class NotFoundError(DomainError):
    status_code = 404
    default_reason = "not_found"


class ConflictError(DomainError):
    status_code = 409
    default_reason = "conflict"


class StateError(DomainError):
    """The record is not in a state that allows the operation (retry differently)."""

    status_code = 409
    default_reason = "invalid_state"


class ServiceUnavailableError(DomainError):
    """A runtime dependency (e.g. a native library) is missing on this host."""

    status_code = 503
    default_reason = "service_unavailable"


class StorageError(DomainError):
    """Persistence layer failure; never retried by the core."""

    status_code = 500
    default_reason = "storage_error"


class DuplicateRecordError(DomainError):
    """A unique key rejected an insert (e.g. second check-in for the same day)."""

    status_code = 409
    default_reason = "duplicate"
