"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They serve as stable contracts between repositories,
infrastructure adapters, and application services.

The translation to HTTP responses (RFC 7807) is handled by
``yuroku/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.

    Notes
    -----
    PostgreSQL reports the constraint name; SQLite only reports the columns
    (``UNIQUE constraint failed: users.email``), so the column suffix of the
    constraint name is matched as well.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    # uq_<table>_<column> -> "<table>.<column>"
    parts = name.split("_", 2)
    if len(parts) == 3 and parts[0] == "uq":
        return f"{parts[1]}.{parts[2]}" in message
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, adapters or domain logic.
    - The API layer translates them to APIError.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True, eq=False)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True, eq=False)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


@dataclass(slots=True, eq=False)
class CapacityExceededError(ServiceError):
    """
    Raised when adding a child would exceed a per-parent cap.

    :param entity: Capped entity name (e.g., "Image").
    :param limit: Maximum number allowed per parent.
    """

    entity: str
    limit: int

    def __str__(self) -> str:
        return f"{self.entity} limit reached: at most {self.limit} allowed"


class ValidationError(ServiceError):
    """
    Raised when input violates a domain rule (password policy, enum value, ...).

    :param message: Human-readable explanation.
    :param field: Offending field name, when known.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class AuthenticationError(ServiceError):
    """Raised for bad credentials. The message never reveals which part failed."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class ForbiddenError(ServiceError):
    """Raised when a valid identity acts on a resource it does not own."""

    def __init__(self, message: str = "You do not have access to this resource") -> None:
        super().__init__(message)


class TokenError(ServiceError):
    """Base class for token verification failures."""

    code = "invalid_token"


class InvalidTokenError(TokenError):
    """Malformed token, unexpected algorithm, bad claims, wrong type or revoked."""

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class BadSignatureError(InvalidTokenError):
    """Signature does not match the token contents."""

    def __init__(self, message: str = "Token signature verification failed") -> None:
        super().__init__(message)


class TokenExpiredError(TokenError):
    """Token ``exp`` lies in the past."""

    code = "token_expired"

    def __init__(self, message: str = "Token has expired") -> None:
        super().__init__(message)


class StorageError(ServiceError):
    """Raised when a storage backend (files, database, cache) is unavailable."""

    def __init__(self, message: str = "Storage backend unavailable") -> None:
        super().__init__(message)
