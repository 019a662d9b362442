"""PyJWT-backed token engine (HMAC-SHA256)."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import jwt

from yuroku.services._shared.errors import (
    BadSignatureError,
    InvalidTokenError,
    TokenExpiredError,
)
from yuroku.services._shared.ports.token_provider import (
    TOKEN_TYPES,
    TokenClaims,
    TokenProvider,
)

log = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["sub", "typ", "iat", "exp", "jti"]


class JWTTokenProvider(TokenProvider):
    """
    Mint and verify compact JWS tokens signed with a shared secret.

    The provider holds no mutable state: the secret is injected once and
    every call is a pure function of its input, the secret and the clock.

    :param secret: HMAC key. Must be non-empty.
    :param algorithm: Signing algorithm; only this algorithm is accepted on verify.
    """

    def __init__(self, secret: str, *, algorithm: str = "HS256") -> None:
        if not secret:
            raise ValueError("A non-empty signing secret is required.")
        self._secret = secret
        self._algorithm = algorithm

    def issue(self, subject: str, token_type: str, ttl: timedelta) -> str:
        """
        Mint a token for ``subject``.

        :param subject: User identifier (stringified into ``sub``).
        :param token_type: ``"access"`` or ``"refresh"``.
        :param ttl: Lifetime; must be positive.
        :returns: Encoded ``header.payload.signature`` string.
        """
        if token_type not in TOKEN_TYPES:
            raise ValueError(f"Unknown token type: {token_type!r}")
        if ttl <= timedelta(0):
            raise ValueError("Token lifetime must be positive.")

        now = datetime.now(UTC)
        payload = {
            "sub": str(subject),
            "typ": token_type,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify signature, algorithm and expiry, then return typed claims.

        Token type is deliberately not enforced here; callers decide which
        types they accept.

        :raises TokenExpiredError: ``exp`` is in the past.
        :raises BadSignatureError: Signature mismatch.
        :raises InvalidTokenError: Malformed token, foreign algorithm or bad claims.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.InvalidSignatureError as exc:
            log.warning("token.bad_signature")
            raise BadSignatureError() from exc
        except jwt.InvalidTokenError as exc:
            # DecodeError, InvalidAlgorithmError, MissingRequiredClaimError, ...
            raise InvalidTokenError() from exc

        return TokenClaims.from_payload(payload)
