from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from yuroku.services._shared.errors import InvalidTokenError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"
TOKEN_TYPES = frozenset({ACCESS_TOKEN_TYPE, REFRESH_TOKEN_TYPE})

# claim -> accepted runtime types
_REQUIRED_CLAIMS: dict[str, tuple[type, ...]] = {
    "sub": (str,),
    "typ": (str,),
    "jti": (str,),
    "iat": (int, float),
    "exp": (int, float),
}


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified, strongly-typed token claims.

    :ivar subject: User identifier the token was issued for.
    :ivar token_type: ``"access"`` or ``"refresh"``.
    :ivar issued_at: Issue instant (UTC).
    :ivar expires_at: Expiry instant (UTC).
    :ivar jti: Unique token identifier (denylist key).
    """

    subject: str
    token_type: str
    issued_at: datetime
    expires_at: datetime
    jti: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> TokenClaims:
        """
        Build claims from a decoded payload, rejecting incomplete or mistyped ones.

        :raises InvalidTokenError: When a claim is missing, has the wrong type,
            or ``typ`` is not a known token type.
        """
        for claim, types in _REQUIRED_CLAIMS.items():
            value = payload.get(claim)
            if value is None:
                raise InvalidTokenError(f"Token is missing the '{claim}' claim")
            if isinstance(value, bool) or not isinstance(value, types):
                raise InvalidTokenError(f"Token claim '{claim}' has an invalid type")
        if not payload["sub"]:
            raise InvalidTokenError("Token subject is empty")
        if payload["typ"] not in TOKEN_TYPES:
            raise InvalidTokenError("Unknown token type")

        return cls(
            subject=payload["sub"],
            token_type=payload["typ"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
            jti=payload["jti"],
        )


class TokenProvider(Protocol):
    """Port for minting and verifying signed bearer tokens."""

    def issue(self, subject: str, token_type: str, ttl: timedelta) -> str: ...

    def verify(self, token: str) -> TokenClaims: ...
