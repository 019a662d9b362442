# yuroku/services/_shared/base.py
from __future__ import annotations

from typing import Any, TypeVar

from yuroku.core import errors as api_errors
from yuroku.repositories.base import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, Pagination
from yuroku.services._shared.errors import (
    AuthenticationError,
    CapacityExceededError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceError,
    StorageError,
    TokenError,
    ValidationError,
)
from yuroku.services._shared.policies.common import is_owner
from yuroku.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

R = TypeVar("R")


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Offer shared helpers (pagination normalization, ownership checks).

    Notes
    -----
    Services never touch the global session directly; they always go
    through a Unit of Work.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "REPEATABLE READ").
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(
        self,
        *,
        page: Any,
        limit: Any,
        default_limit: int = DEFAULT_PAGE_SIZE,
        max_limit: int = MAX_PAGE_SIZE,
    ) -> Pagination:
        """
        Normalize raw pagination input; never raises.

        :param page: 1-based page number (any type; unparsable -> 1).
        :param limit: Page size (outside ``[1, max_limit]`` -> ``default_limit``).
        :rtype: Pagination
        """
        return Pagination.normalize(
            page, limit, default_limit=default_limit, max_limit=max_limit
        )

    # --------------------------- AuthZ --------------------------------

    def ensure_owner(
        self,
        actor_id: int | None,
        resource: R | None,
        *,
        entity: str,
        key: Any,
    ) -> R:
        """
        Single ownership gate applied before any read or mutation.

        :param actor_id: Resolved token subject.
        :param resource: Loaded row (``None`` when absent); must expose ``user_id``.
        :param entity: Entity name used in error messages.
        :param key: Identifier requested by the caller.
        :returns: ``resource`` when owned by ``actor_id``.
        :raises NotFoundError: If ``resource`` is ``None``.
        :raises ForbiddenError: If another user owns it.
        """
        if resource is None:
            raise NotFoundError(entity, key)
        if not is_owner(actor_id=actor_id, owner_id=getattr(resource, "user_id", None)):
            raise ForbiddenError(f"You do not have access to this {entity.lower()}")
        return resource

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :returns: Translated exception ready to be raised/serialized.
        :rtype: Exception
        """
        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, CapacityExceededError):
            return api_errors.Conflict(str(exc), code="capacity_exceeded")

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc), code="duplicate_entity")

        if isinstance(exc, ValidationError):
            details = {"field": exc.field} if exc.field else None
            return api_errors.UnprocessableEntity(str(exc), details=details)

        if isinstance(exc, AuthenticationError):
            return api_errors.Unauthorized(str(exc), code="authentication_error")

        if isinstance(exc, TokenError):
            return api_errors.Unauthorized(str(exc), code=exc.code)

        if isinstance(exc, ForbiddenError):
            return api_errors.Forbidden(str(exc))

        if isinstance(exc, StorageError):
            return api_errors.ServiceUnavailable(str(exc))

        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")

        return exc
