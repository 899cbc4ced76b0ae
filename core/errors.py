"""Service layer error taxonomy.

Every error a service raises is a ``ServiceError`` tagged with an
``ErrorKind``, a human message and a stable machine-readable code. The
helpers below only fix the kind (and a default code); route handlers never
look at the Python class, they switch on ``err.kind`` (see ``STATUS_BY_KIND``).
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    OPERATION = "operation"


# Boundary mapping kind -> HTTP status
STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.OPERATION: 500,
}


class ServiceError(Exception):
    """Base service layer exception."""

    kind: ErrorKind = ErrorKind.OPERATION
    default_code: str = "OPERATION_FAILED"

    def __init__(self, message: str, code: str | None = None, *, kind: ErrorKind | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        if kind is not None:
            self.kind = kind

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message, "code": self.code}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, code={self.code!r}, message={self.message!r})"


class ValidationError(ServiceError):
    """Input validation failed."""

    kind = ErrorKind.VALIDATION
    default_code = "VALIDATION_ERROR"


class NotFoundError(ServiceError):
    """Entity not found."""

    kind = ErrorKind.NOT_FOUND
    default_code = "NOT_FOUND"


class ConflictError(ServiceError):
    """Conflict (duplicate / invariant violation)."""

    kind = ErrorKind.CONFLICT
    default_code = "CONFLICT"


class ForbiddenError(ServiceError):
    """Caller is authenticated but lacks the required role."""

    kind = ErrorKind.FORBIDDEN
    default_code = "FORBIDDEN"


class UnauthorizedError(ServiceError):
    """Bad credentials or missing / invalid token."""

    kind = ErrorKind.UNAUTHORIZED
    default_code = "UNAUTHORIZED"


class OperationError(ServiceError):
    """Persistence reported an unexpected failure."""

    kind = ErrorKind.OPERATION
    default_code = "OPERATION_FAILED"


__all__ = [
    "ErrorKind",
    "STATUS_BY_KIND",
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ForbiddenError",
    "UnauthorizedError",
    "OperationError",
]
