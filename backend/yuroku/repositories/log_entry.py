"""Owner-scoped persistence and search for :class:`LogEntry`."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from sqlalchemy import Select, delete, select

from yuroku.models.log_entry import LogEntry
from yuroku.repositories.base import BaseRepository, Page, Pagination, paginate_select


@dataclass(frozen=True, slots=True)
class LogFilter:
    """
    Optional search criteria, combined with AND.

    :param spring_type: Exact match on the categorical type.
    :param location: Case-insensitive substring of ``location``.
    :param min_rating: Inclusive lower bound; ``0``/``None`` means no constraint.
    :param start_date: Inclusive lower bound on ``visit_date``.
    :param end_date: Inclusive upper bound on ``visit_date``.
    """

    spring_type: str | None = None
    location: str | None = None
    min_rating: int | None = None
    start_date: date | None = None
    end_date: date | None = None


class LogEntryRepository(BaseRepository[LogEntry]):
    """
    Repository for log entries.

    Every query built here starts from :meth:`_owned`, so no code path can
    read another owner's rows.
    """

    model = LogEntry

    def _updatable_fields(self) -> set[str]:
        # user_id is never updatable
        return {"name", "location", "spring_type", "features", "visit_date", "rating", "comment"}

    # ---------------------------- Query engine ----------------------------

    @staticmethod
    def _owned(owner_id: int) -> Select[Any]:
        return select(LogEntry).where(LogEntry.user_id == owner_id)

    @staticmethod
    def _apply_filter(stmt: Select[Any], criteria: LogFilter) -> Select[Any]:
        if criteria.spring_type:
            stmt = stmt.where(LogEntry.spring_type == criteria.spring_type)
        if criteria.location and criteria.location.strip():
            stmt = stmt.where(LogEntry.location.icontains(criteria.location.strip(), autoescape=True))
        if criteria.min_rating and criteria.min_rating > 0:
            stmt = stmt.where(LogEntry.rating >= criteria.min_rating)
        if criteria.start_date is not None:
            stmt = stmt.where(LogEntry.visit_date >= criteria.start_date)
        if criteria.end_date is not None:
            stmt = stmt.where(LogEntry.visit_date <= criteria.end_date)
        return stmt

    def search(
        self,
        owner_id: int,
        criteria: LogFilter | None,
        pagination: Pagination,
    ) -> Page[LogEntry]:
        """
        Return one page of the owner's entries matching ``criteria``.

        Ordered by ``visit_date`` descending (most recent first), then id.
        ``total`` counts the whole filtered set using the same predicate.

        :param owner_id: Resolved subject; always enforced.
        :param criteria: Optional filters; ``None`` lists everything.
        :param pagination: Normalized page/limit.
        :returns: Page of entries.
        """
        stmt = self._owned(owner_id)
        if criteria is not None:
            stmt = self._apply_filter(stmt, criteria)
        stmt = stmt.order_by(LogEntry.visit_date.desc(), LogEntry.id.desc())

        items, total = paginate_select(
            self.session, stmt, page=pagination.page, limit=pagination.limit
        )
        return Page(items=items, total=total, page=pagination.page, limit=pagination.limit)

    def list_all_for_owner(self, owner_id: int) -> list[LogEntry]:
        """Every entry of ``owner_id``, most recent visit first (export)."""
        stmt = self._owned(owner_id).order_by(LogEntry.visit_date.desc(), LogEntry.id.desc())
        return list(self.session.execute(stmt).scalars().all())

    def delete_all_by_owner(self, owner_id: int) -> int:
        """Bulk-delete the owner's entries; images must be removed beforehand."""
        result = self.session.execute(delete(LogEntry).where(LogEntry.user_id == owner_id))
        return int(result.rowcount or 0)
