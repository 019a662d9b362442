from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import Protocol


class TokenDenylistStore(Protocol):
    """
    Abstraction for a denylist of revoked tokens keyed by ``jti``.

    Entries only need to live until the token would have expired anyway.
    ``revoke_jti`` is a single conditional write: it returns ``True`` only
    for the caller that actually moved the jti onto the list, so two
    concurrent consumers of the same token cannot both win.
    """

    def is_revoked(self, jti: str) -> bool: ...
    def revoke_jti(self, *, jti: str, expires_at: datetime) -> bool: ...


class InMemoryDenylistStore(TokenDenylistStore):
    """Process-local denylist used when no Redis is configured (and in tests)."""

    def __init__(self) -> None:
        self._revoked: dict[str, datetime] = {}
        self._lock = threading.Lock()

    def is_revoked(self, jti: str) -> bool:
        with self._lock:
            self._prune()
            return jti in self._revoked

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> bool:
        with self._lock:
            self._prune()
            if jti in self._revoked:
                return False
            self._revoked[jti] = expires_at
            return True

    def _prune(self) -> None:
        # expired tokens are dead on their own; forget them
        now = datetime.now(UTC)
        for key in [k for k, exp in self._revoked.items() if exp <= now]:
            del self._revoked[key]
