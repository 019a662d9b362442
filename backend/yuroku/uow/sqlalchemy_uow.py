"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from yuroku.core.extensions import db
from yuroku.repositories import ImageRepository, LogEntryRepository, UserRepository
from yuroku.uow.base import UnitOfWork

log = logging.getLogger(__name__)


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.log_entries = LogEntryRepository(session=self.session)
        self.images = ImageRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write UoW on the Flask-scoped session.

    Commits when the block exits cleanly and rolls back on any exception,
    so a use case either applies completely or not at all.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session starts its transaction lazily on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only UoW: blocks writes and always rolls back.

    Parameters
    ----------
    isolation_level:
        Optional ``SET TRANSACTION ISOLATION LEVEL`` hint, only issued when
        this UoW owns the transaction and the dialect supports it.
    enforce_db_readonly:
        Issue ``SET TRANSACTION READ ONLY`` on PostgreSQL/MySQL.

    Notes
    -----
    On SQLite (and when attaching to an already running transaction) only the
    ORM/cursor guards apply.
    """

    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
    )
    _SERVER_DIALECTS = ("postgresql", "mysql", "mariadb")

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._conn: Connection | None = None
        self._txn_ctx: SessionTransaction | None = None
        self._guards: list[tuple[Any, str, Any]] = []

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        try:
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx
        except InvalidRequestError:
            # Already inside a transaction (autobegin or test fixture): attach.
            self._txn_ctx = None

        self._conn = self.session.connection()
        self._install_guards()

        if self._txn_ctx is not None and self._conn.dialect.name in self._SERVER_DIALECTS:
            try:
                if self.isolation_level:
                    iso = self.isolation_level.upper().strip()
                    self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
                if self.enforce_db_readonly:
                    self.session.execute(text("SET TRANSACTION READ ONLY"))
            except SQLAlchemyError as exc:
                log.warning("SET TRANSACTION directives failed (%s); guards only.", exc)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn_ctx is not None:
                self.session.rollback()
                self._txn_ctx = None
        finally:
            self._remove_guards()
            self._conn = None

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Guards ---------------------------------

    def _install_guards(self) -> None:
        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")

        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            first = statement.lstrip().split(None, 1)[0].lower() if statement else ""
            if first.startswith(self._WRITE_PREFIXES):
                raise RuntimeError(f"Read-only UnitOfWork: {first.upper()} blocked.")

        target = self._conn if self._conn is not None else self.session.get_bind()
        event.listen(self.session, "before_flush", _before_flush)
        event.listen(target, "before_cursor_execute", _before_cursor_execute)
        self._guards = [
            (self.session, "before_flush", _before_flush),
            (target, "before_cursor_execute", _before_cursor_execute),
        ]

    def _remove_guards(self) -> None:
        for target, name, fn in self._guards:
            if event.contains(target, name, fn):
                event.remove(target, name, fn)
        self._guards = []
