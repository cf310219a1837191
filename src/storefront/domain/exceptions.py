"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the application and CLI layers can catch them uniformly and display
user-friendly messages.

Field-level input problems (card number, expiry, phone...) are NOT
exceptions: they are returned as ``FieldError`` values by the validators.
"""

from __future__ import annotations

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class RemoteServiceError(DomainException):
    """The remote cart/order service rejected a request or was unreachable.

    A ``success=false`` envelope and a transport failure are treated the
    same way: both are recoverable and leave local state untouched.
    """

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message or DEFAULT_ERROR_MESSAGE)
        self.status_code = status_code
