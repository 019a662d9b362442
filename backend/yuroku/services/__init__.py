"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`yuroku.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``yuroku.services._shared.base``)
    * :class:`BaseService`

- Shared DTOs (from ``yuroku.services._shared.dto``)
    * :class:`PageMeta`
    * :class:`PageOut`

- Auth service (from ``yuroku.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`LogoutIn`,
      :class:`ProfileUpdateIn`, :class:`PasswordChangeIn`, :class:`UserOut`,
      :class:`TokenPairOut`, :class:`LoginOut`

- Log service (from ``yuroku.services.logs``)
    * :class:`LogService`
    * DTOs: :class:`LogEntryCreateIn`, :class:`LogEntryUpdateIn`,
      :class:`ImageUploadIn`, :class:`LogEntryOut`, :class:`ImageOut`,
      :class:`ExportOut`
"""

from __future__ import annotations

# Base primitives
from ._shared.base import BaseService

# Shared DTOs (compose these in endpoint-specific DTOs)
from ._shared.dto import PageMeta, PageOut
from .auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LoginOut,
    LogoutIn,
    PasswordChangeIn,
    ProfileUpdateIn,
    RegisterIn,
    TokenPairOut,
    UserOut,
)

# Auth service + DTOs
from .auth.service import AuthService
from .logs.dto import (
    ExportOut,
    ImageOut,
    ImageUploadIn,
    LogEntryCreateIn,
    LogEntryOut,
    LogEntryUpdateIn,
)

# Log service + DTOs
from .logs.service import LogService

__all__ = [
    # Base
    "BaseService",
    # Shared DTOs
    "PageMeta",
    "PageOut",
    # Auth
    "AuthService",
    "AuthTokenConfig",
    "RegisterIn",
    "LoginIn",
    "LogoutIn",
    "ProfileUpdateIn",
    "PasswordChangeIn",
    "UserOut",
    "TokenPairOut",
    "LoginOut",
    # Logs
    "LogService",
    "LogEntryCreateIn",
    "LogEntryUpdateIn",
    "ImageUploadIn",
    "LogEntryOut",
    "ImageOut",
    "ExportOut",
]
