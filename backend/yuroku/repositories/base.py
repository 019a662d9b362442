"""Generic repository base and query utilities for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:
- Pagination value objects with silent normalization of client input.
- Counting and slicing from one statement so ``total`` always matches the page.
- Safe update helpers with per-repository updatable-field whitelists.

Repositories never commit or roll back; services own the Unit of Work.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from yuroku.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
MAX_OFFSET = 2**62


# ------------------------------- Pagination ----------------------------------


def _to_int(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True, slots=True)
class Pagination:
    """Normalized pagination input.

    :param page: 1-based page number (``>= 1``).
    :type page: int
    :param limit: Page size (``1..max``).
    :type limit: int
    """

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def normalize(
        cls,
        page: Any = None,
        limit: Any = None,
        *,
        default_limit: int = DEFAULT_PAGE_SIZE,
        max_limit: int = MAX_PAGE_SIZE,
    ) -> Pagination:
        """Build a Pagination from raw client values without ever failing.

        * ``page`` below 1 or unparsable becomes ``1``.
        * ``limit`` outside ``[1, max_limit]`` or unparsable becomes ``default_limit``.
        * ``page`` is capped so the row offset fits a signed 64-bit integer.

        :returns: Normalized pagination.
        :rtype: Pagination
        """
        p = _to_int(page)
        lim = _to_int(limit)
        if p is None or p < 1:
            p = 1
        if lim is None or lim < 1 or lim > max_limit:
            lim = default_limit
        p = min(p, MAX_OFFSET // lim)
        return cls(page=p, limit=lim)


@dataclass(frozen=True, slots=True)
class Page(Generic[E]):
    """Result page with metadata.

    :param items: Entities in the current page.
    :param total: Size of the full filtered set (not just this page).
    :param page: 1-based current page number.
    :param limit: Page size.
    """

    items: Sequence[E]
    total: int
    page: int
    limit: int

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total


# --------------------------- Pagination execution ----------------------------


def paginate_select(
    session: Session,
    stmt: Select[Any],
    *,
    page: int,
    limit: int,
) -> tuple[list[Any], int]:
    """Execute ``stmt`` for one page and count the full result set.

    Both queries derive from the very same statement: the count wraps it
    as a subquery (ordering stripped) and the page applies ``LIMIT/OFFSET``,
    so the filter predicate can never diverge between them.

    :param session: Active SQLAlchemy session.
    :param stmt: Filtered and ordered select.
    :param page: 1-based page number.
    :param limit: Page size.
    :returns: ``(items, total)``.
    :rtype: tuple[list[Any], int]
    """
    limit = max(int(limit), 1)
    page = min(max(int(page), 1), MAX_OFFSET // limit)

    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = int(session.execute(count_stmt).scalar_one())
    offset = (page - 1) * limit
    if offset >= total:
        return [], total

    sliced = stmt.limit(limit).offset(offset)
    items = list(session.execute(sliced).scalars().all())
    return items, total


# ------------------------------ Base repository ------------------------------


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define ``model`` and MAY override ``_updatable_fields``.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        Without an explicit session the Flask-scoped ``db.session`` is used.
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session or the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _updatable_fields(self) -> set[str]:
        return set()

    # ------------------------------ Internals --------------------------------

    def _sanitize_update_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Return only whitelisted update keys.

        :raises ValueError: If unknown or non-updatable keys are present.
        """
        allowed = self._updatable_fields()
        unknown = [k for k in fields if k not in allowed]
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        return dict(fields)

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity and flush so its primary key is materialized."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key."""
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        stmt = select(self.model).where(pk_attr == entity_id)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def get_for_update(self, entity_id: Any) -> E | None:
        """Retrieve an entity by PK with a ``FOR UPDATE`` row lock (when supported)."""
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get_for_update requires a detectable PK.")
        stmt = select(self.model).where(pk_attr == entity_id).with_for_update()
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def delete(self, instance: E) -> None:
        """Delete an entity and flush."""
        self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        self.session.flush()

    # ----------------------------- Safe updates -------------------------------

    def update(self, instance: E, **fields: Any) -> E:
        """Assign whitelisted fields (triggering ``@validates``) and flush.

        :raises ValueError: On non-updatable keys or model validation errors.
        """
        for k, v in self._sanitize_update_fields(fields).items():
            setattr(instance, k, v)
        self.flush()
        return instance
