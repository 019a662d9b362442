from datetime import UTC, datetime
from typing import cast

import redis
from redis.exceptions import RedisError

from yuroku.services._shared.errors import StorageError


class RedisTokenDenylistStore:
    """
    Denylist of revoked tokens by ``jti``; each marker expires with its token.
    """

    def __init__(self, r: redis.Redis, *, prefix: str = "deny:jti:"):
        self.r = r
        self.prefix = prefix

    def _k(self, jti: str) -> str:
        return f"{self.prefix}{jti}"

    def is_revoked(self, jti: str) -> bool:
        try:
            return cast(int, self.r.exists(self._k(jti))) == 1
        except RedisError as exc:
            raise StorageError("Token denylist unavailable") from exc

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> bool:
        """``SET NX EX``: true only when this call created the marker."""
        remaining = int(expires_at.timestamp() - datetime.now(UTC).timestamp())
        if remaining <= 0:
            # already expired; nothing left to consume
            return False
        try:
            return bool(self.r.set(self._k(jti), "1", nx=True, ex=remaining))
        except RedisError as exc:
            raise StorageError("Token denylist unavailable") from exc
