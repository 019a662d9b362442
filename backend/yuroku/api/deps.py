"""Shared API helpers: bearer authentication, responses and service wiring."""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from yuroku.core.errors import Unauthorized
from yuroku.core.extensions import get_denylist, get_image_storage, get_token_provider
from yuroku.services._shared.errors import ServiceError
from yuroku.services._shared.ports.token_provider import TokenClaims
from yuroku.services.auth.dto import AuthTokenConfig
from yuroku.services.auth.service import AuthService
from yuroku.services.logs.service import LogService

F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


# --------------------------------------------------------------------------- #
# Service factories
# --------------------------------------------------------------------------- #


def auth_service() -> AuthService:
    """Build an :class:`AuthService` from the current application's adapters."""

    cfg = current_app.config
    return AuthService(
        token_provider=get_token_provider(),
        denylist_store=get_denylist(),
        image_storage=get_image_storage(),
        token_cfg=AuthTokenConfig(
            access_expires=timedelta(minutes=int(cfg["JWT_ACCESS_TOKEN_EXPIRES_MINUTES"])),
            refresh_expires=timedelta(days=int(cfg["JWT_REFRESH_TOKEN_EXPIRES_DAYS"])),
        ),
    )


def log_service() -> LogService:
    """Build a :class:`LogService` bound to the configured image storage."""

    cfg = current_app.config
    return LogService(
        image_storage=get_image_storage(),
        max_images=int(cfg["MAX_IMAGES_PER_LOG"]),
        default_limit=int(cfg["DEFAULT_PAGE_SIZE"]),
        max_limit=int(cfg["MAX_PAGE_SIZE"]),
    )


# --------------------------------------------------------------------------- #
# Bearer authentication
# --------------------------------------------------------------------------- #


def extract_bearer_token() -> str:
    """Return the token from ``Authorization: Bearer <token>``.

    :raises Unauthorized: ``missing_token`` without a header,
        ``invalid_token_format`` when it is not exactly two parts.
    """

    header = request.headers.get("Authorization", "").strip()
    if not header:
        raise Unauthorized("Authorization header is required", code="missing_token")
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        raise Unauthorized(
            "Authorization header must be 'Bearer <token>'", code="invalid_token_format"
        )
    return parts[1]


def _bind_identity(token: str) -> TokenClaims:
    claims = auth_service().verify_token(token)
    g.subject_id = AuthService.coerce_subject(claims.subject)
    g.token_claims = claims
    g.bearer_token = token
    return claims


def require_auth(func: F) -> F:
    """Reject the request unless it carries a valid, non-revoked bearer token.

    Access and refresh tokens are both accepted; the resolved subject is
    bound to ``g.subject_id``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        _bind_identity(extract_bearer_token())
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def optional_auth(func: F) -> F:
    """Bind the subject when a valid token is present; otherwise continue anonymously."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            _bind_identity(extract_bearer_token())
        except (Unauthorized, ServiceError) as exc:
            log.debug("auth.optional_anonymous reason=%s", exc)
            g.pop("subject_id", None)
            g.pop("token_claims", None)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_subject() -> int:
    """Return the authenticated user id bound by :func:`require_auth`."""

    subject_id = g.get("subject_id")
    if subject_id is None:
        raise Unauthorized("Authentication required", code="missing_token")
    return int(subject_id)


# --------------------------------------------------------------------------- #
# Responses
# --------------------------------------------------------------------------- #


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
