"""Authentication helpers for tests."""

from __future__ import annotations

from datetime import timedelta

from freezegun import freeze_time

from yuroku.core.extensions import get_token_provider
from yuroku.services._shared.ports.token_provider import ACCESS_TOKEN_TYPE

TEST_PASSWORD = "Passw0rd123"


def issue_token(
    identity: int,
    token_type: str = ACCESS_TOKEN_TYPE,
    ttl: timedelta = timedelta(minutes=15),
) -> str:
    """Mint a token for ``identity`` with the application's provider.

    Must be called inside an application context.
    """
    return get_token_provider().issue(str(identity), token_type, ttl)


def expired_token(identity: int) -> str:
    """Return a token for ``identity`` that expired long ago."""
    with freeze_time("2020-01-01 00:00:00"):
        return issue_token(identity, ttl=timedelta(minutes=1))


def bearer(token: str) -> dict[str, str]:
    """Return an ``Authorization`` header for ``token``."""
    return {"Authorization": f"Bearer {token}"}
