from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Raised when input data is invalid.

    ``errors`` maps a field name to the list of reasons it was rejected.
    """

    def __init__(self, message: str = "invalid payload", errors: Optional[dict[str, list[str]]] = None):
        super().__init__(message)
        self.errors = dict(errors or {})


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class DuplicateError(DomainError):
    """Raised when a unique constraint is violated."""

    def __init__(self, field: str):
        super().__init__(f"{field} already registered")
        self.field = field


class AuthenticationError(DomainError):
    """Raised when credentials or bearer tokens are invalid."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""


class StateConflictError(DomainError):
    """Raised when an operation is not valid from the current attendance state."""


class StoreError(DomainError):
    """Raised when the persistence layer fails."""
