"""
yuroku.services._shared.ports
=============================

Collection of *ports* (hexagonal interfaces) the service layer depends on.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider` and :class:`~.TokenClaims`.

- :mod:`denylist_store`:
    Defines :class:`~.TokenDenylistStore`, revocation of tokens by ``jti``.

- :mod:`image_storage`:
    Defines :class:`~.ImageStorage`, the upload/delete contract for photos.

Concrete adapters (PyJWT, Redis, local filesystem) live under ``yuroku.infra``.
"""

from __future__ import annotations

from .denylist_store import InMemoryDenylistStore, TokenDenylistStore
from .image_storage import ImageStorage
from .token_provider import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenClaims,
    TokenProvider,
)

__all__ = [
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_TYPE",
    "ImageStorage",
    "InMemoryDenylistStore",
    "TokenClaims",
    "TokenDenylistStore",
    "TokenProvider",
]
