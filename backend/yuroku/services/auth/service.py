# yuroku/services/auth/service.py
from __future__ import annotations

import logging
import re

from sqlalchemy.exc import IntegrityError

from yuroku.models.user import User
from yuroku.repositories.user import UserRepository, normalize_email
from yuroku.services._shared.base import BaseService
from yuroku.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    StorageError,
    ValidationError,
    violates,
)
from yuroku.services._shared.ports.denylist_store import TokenDenylistStore
from yuroku.services._shared.ports.image_storage import ImageStorage
from yuroku.services._shared.ports.token_provider import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenClaims,
    TokenProvider,
)
from yuroku.services.auth.dto import (
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

log = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
_HAS_LETTER = re.compile(r"[A-Za-z]")
_HAS_DIGIT = re.compile(r"\d")


def validate_password(password: str) -> None:
    """
    Enforce the password policy: at least 8 characters, one letter and one digit.

    :raises ValidationError: When the password does not satisfy the policy.
    """
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long", field="password"
        )
    if not _HAS_LETTER.search(password) or not _HAS_DIGIT.search(password):
        raise ValidationError(
            "Password must contain at least one letter and one digit", field="password"
        )


def _to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class AuthService(BaseService):
    """
    Authentication lifecycle service.

    Covers registration, login, token issuance and rotation, logout and the
    account self-service operations. Tokens are minted and verified through
    a pluggable :class:`TokenProvider`; early revocation goes through a
    :class:`TokenDenylistStore` keyed by ``jti``.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        denylist_store: TokenDenylistStore,
        image_storage: ImageStorage | None = None,
        token_cfg: AuthTokenConfig | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for issuing/verifying JWTs.
        :param denylist_store: Denylist of revoked token ids.
        :param image_storage: Blob storage, needed to purge files on account deletion.
        :param token_cfg: Access/Refresh expiry configuration.
        """
        self.tokens = token_provider
        self.denylist = denylist_store
        self.storage = image_storage
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Registration & login
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserOut:
        """
        Register a new user.

        :param dto: Registration input.
        :returns: Public-safe user DTO.
        :raises ValidationError: If the password or profile fields are invalid.
        :raises ConflictError: If the email is already registered.
        """
        validate_password(dto.password)
        email = normalize_email(dto.email)

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users

            if repo.exists_by_email(email):
                raise ConflictError("User", "email already registered")

            try:
                user = User(name=dto.name, email=email)
                user.password = dto.password  # setter hashes
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc

            try:
                repo.add(user)
            except IntegrityError as exc:
                if violates(exc, "uq_users_email"):
                    raise ConflictError("User", "email already registered") from exc
                raise

            out = _to_user_out(user)

        log.info("auth.register", extra={"user_id": out.id})
        return out

    def authenticate(self, dto: LoginIn) -> UserOut:
        """
        Verify credentials.

        :raises AuthenticationError: For unknown email and wrong password alike.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.authenticate(dto.email, dto.password)
            if user is None:
                log.warning("auth.login_failed")
                raise AuthenticationError()
            return _to_user_out(user)

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: The user and an access/refresh token pair.
        :raises AuthenticationError: If credentials are invalid.
        """
        user = self.authenticate(dto)
        tokens = self.issue_token_pair(user.id)
        log.info("auth.login", extra={"user_id": user.id})
        return LoginOut(user=user, tokens=tokens)

    def issue_token_pair(self, user_id: int) -> TokenPairOut:
        """Mint an access token and a refresh token for ``user_id``."""
        subject = str(user_id)
        access = self.tokens.issue(subject, ACCESS_TOKEN_TYPE, self.cfg.access_expires)
        refresh = self.tokens.issue(subject, REFRESH_TOKEN_TYPE, self.cfg.refresh_expires)
        return TokenPairOut(
            access_token=access,
            refresh_token=refresh,
            expires_in=int(self.cfg.access_expires.total_seconds()),
        )

    # ------------------------------------------------------------------ #
    # Token verification, rotation & revocation
    # ------------------------------------------------------------------ #

    def verify_token(self, token: str) -> TokenClaims:
        """
        Verify ``token`` and reject revoked ones.

        :raises TokenExpiredError: If the token is past its expiry.
        :raises InvalidTokenError: If it is malformed, badly signed or revoked.
        """
        claims = self.tokens.verify(token)
        if self.denylist.is_revoked(claims.jti):
            raise InvalidTokenError("Token has been revoked")
        return claims

    def refresh(self, refresh_token: str) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        The consumed refresh token is denylisted, so it can be used only once.

        :raises InvalidTokenError: Wrong token type, bad token or already used.
        :raises TokenExpiredError: If the refresh token expired.
        :raises NotFoundError: If the subject no longer exists.
        """
        claims = self.verify_token(refresh_token)
        if claims.token_type != REFRESH_TOKEN_TYPE:
            raise InvalidTokenError("Refresh token required")

        user_id = self.coerce_subject(claims.subject)
        with self.ro_uow() as uow:
            if uow.users.get(user_id) is None:
                raise NotFoundError("User", user_id)

        if not self.denylist.revoke_jti(jti=claims.jti, expires_at=claims.expires_at):
            # a concurrent refresh consumed it first
            raise InvalidTokenError("Token has been revoked")
        log.info("auth.refresh", extra={"user_id": user_id})
        return self.issue_token_pair(user_id)

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke the presented token and, when given, its refresh token.

        Both tokens are checked before anything is revoked, so a rejected
        logout leaves the session untouched.

        :raises InvalidTokenError: If a token is malformed, revoked or foreign.
        """
        claims = self.verify_token(dto.token)
        refresh = None
        if dto.refresh_token:
            refresh = self.verify_token(dto.refresh_token)
            if refresh.subject != claims.subject or refresh.token_type != REFRESH_TOKEN_TYPE:
                raise InvalidTokenError("Refresh token does not belong to this session")

        self.denylist.revoke_jti(jti=claims.jti, expires_at=claims.expires_at)
        if refresh is not None:
            self.denylist.revoke_jti(jti=refresh.jti, expires_at=refresh.expires_at)

        log.info("auth.logout", extra={"user_id": claims.subject})

    @staticmethod
    def coerce_subject(subject: str) -> int:
        """Convert a token subject into a user id."""
        try:
            return int(subject)
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError("Token subject is not a user id") from exc

    # ------------------------------------------------------------------ #
    # Account self-service
    # ------------------------------------------------------------------ #

    def get_current_user(self, user_id: int) -> UserOut:
        """
        Resolve the authenticated subject.

        :raises NotFoundError: If the user was deleted.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return _to_user_out(user)

    def update_profile(self, user_id: int, dto: ProfileUpdateIn) -> UserOut:
        """
        Update name and/or email.

        :raises ConflictError: If the new email belongs to another user.
        :raises ValidationError: If a field is invalid.
        """
        changes: dict[str, str] = {}
        if dto.name is not None:
            changes["name"] = dto.name
        if dto.email is not None:
            changes["email"] = normalize_email(dto.email)

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            if "email" in changes and repo.exists_by_email(changes["email"], exclude_id=user_id):
                raise ConflictError("User", "email already registered")

            try:
                repo.update(user, **changes)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            except IntegrityError as exc:
                if violates(exc, "uq_users_email"):
                    raise ConflictError("User", "email already registered") from exc
                raise

            return _to_user_out(user)

    def change_password(self, user_id: int, dto: PasswordChangeIn) -> None:
        """
        Replace the password after re-verifying the current one.

        :raises AuthenticationError: If ``current_password`` is wrong.
        :raises ValidationError: If the new password violates the policy.
        """
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            if not user.verify_password(dto.current_password):
                raise AuthenticationError()
            validate_password(dto.new_password)
            repo.update_password(user, dto.new_password)

        log.info("auth.password_changed", extra={"user_id": user_id})

    def delete_account(self, user_id: int, password: str) -> None:
        """
        Delete the user with every log entry, image row and stored image file.

        :raises AuthenticationError: If ``password`` is wrong.
        """
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            if not user.verify_password(password):
                raise AuthenticationError()

            urls = uow.images.urls_for_owner(user_id)
            uow.images.delete_all_by_owner(user_id)
            removed = uow.log_entries.delete_all_by_owner(user_id)
            uow.users.delete(user)

        self._purge_files(urls)
        log.info(
            "auth.account_deleted removed_logs=%d removed_images=%d",
            removed,
            len(urls),
            extra={"user_id": user_id},
        )

    def _purge_files(self, urls: list[str]) -> None:
        # rows are already gone; an orphaned file is logged, not resurrected
        if self.storage is None:
            return
        for url in urls:
            try:
                self.storage.delete(url)
            except StorageError:
                log.warning("storage.orphaned url=%s", url, exc_info=True)
