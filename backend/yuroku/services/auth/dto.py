# yuroku/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param name: Display name.
    :type name: str
    :param email: Login email (normalized by the service).
    :type email: str
    :param password: Raw password (hashed before persistence).
    :type password: str
    """

    name: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param token: Encoded bearer token used for the request.
    :type token: str
    :param refresh_token: Optional refresh token to revoke alongside it.
    :type refresh_token: str | None
    """

    token: str
    refresh_token: str | None = None


@dataclass(frozen=True, slots=True)
class ProfileUpdateIn:
    """Partial profile update; ``None`` leaves a field untouched."""

    name: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    current_password: str
    new_password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Public-safe user representation (never carries the password hash).

    :param id: User identifier.
    :param name: Display name.
    :param email: Normalized email.
    :param created_at: Creation timestamp.
    :param updated_at: Last update timestamp.
    """

    id: int
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    :param expires_in: Access token lifetime in seconds.
    :type expires_in: int
    """

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class LoginOut:
    user: UserOut
    tokens: TokenPairOut


# ----------------------------- Config DTO --------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    """

    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=7)
