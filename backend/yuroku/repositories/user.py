"""User repository for persistence and authentication utilities."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from yuroku.models.user import User
from yuroku.repositories.base import BaseRepository


def normalize_email(email: str) -> str:
    """Return the canonical (trimmed, lowercase) form used for storage and lookup."""
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Lookups by email are case-insensitive because emails are stored
    normalized. Token handling never happens here.
    """

    model = User

    def _updatable_fields(self) -> set[str]:
        """Profile fields only; passwords go through :meth:`update_password`."""
        return {"name", "email"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == normalize_email(email))
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str, *, exclude_id: int | None = None) -> bool:
        """Return ``True`` when another user already owns ``email``.

        :param email: Email address to normalise and search.
        :param exclude_id: User id ignored by the check (profile updates).
        """
        stmt = select(User.id).where(User.email == normalize_email(email))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.execute(stmt).first() is not None

    # ---------------------------- Password ops ----------------------------

    def update_password(self, user: User, new_password: str) -> None:
        """Re-hash the password of ``user`` and flush."""
        user.password = new_password  # setter hashes
        self.flush()

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user when ``email``/``password`` match, else ``None``.

        Callers must not distinguish "unknown email" from "wrong password".
        """
        user = self.get_by_email(email)
        if user is None or not user.verify_password(password):
            return None
        return user
