"""Authentication and profile endpoints."""

from __future__ import annotations

from dataclasses import asdict

from flask import Blueprint, current_app, g, request

from yuroku.api.deps import auth_service, current_subject, json_response, require_auth, timing
from yuroku.core.extensions import limiter
from yuroku.schemas import (
    AccountDeleteSchema,
    LoginSchema,
    LogoutSchema,
    PasswordChangeSchema,
    ProfileUpdateSchema,
    RefreshSchema,
    RegisterSchema,
    TokenResponseSchema,
    UserSchema,
)
from yuroku.services.auth.dto import (
    LoginIn,
    LogoutIn,
    PasswordChangeIn,
    ProfileUpdateIn,
    RegisterIn,
)

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
profile_update_schema = ProfileUpdateSchema()
password_change_schema = PasswordChangeSchema()
account_delete_schema = AccountDeleteSchema()
user_schema = UserSchema()
token_schema = TokenResponseSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


def _body() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@timing
def register():
    """Register a new user and return the created representation."""

    data = register_schema.load(_body())
    user = auth_service().register(RegisterIn(**data))
    return json_response({"data": user_schema.dump(asdict(user))}, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = login_schema.load(_body())
    result = auth_service().login(LoginIn(**data))
    body = {
        "data": {
            "user": user_schema.dump(asdict(result.user)),
            **token_schema.dump(asdict(result.tokens)),
        }
    }
    return json_response(body)


@bp.post("/refresh")
@timing
def refresh():
    """Exchange a refresh token for a new pair; the old one stops working."""

    data = refresh_schema.load(_body())
    tokens = auth_service().refresh(data["refresh_token"])
    return json_response({"data": token_schema.dump(asdict(tokens))})


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Revoke the bearer token (and the refresh token, when supplied)."""

    data = logout_schema.load(_body())
    auth_service().logout(LogoutIn(token=g.bearer_token, refresh_token=data.get("refresh_token")))
    return json_response({"message": "Logged out"})


@bp.get("/profile")
@require_auth
@timing
def get_profile():
    """Return the authenticated user."""

    user = auth_service().get_current_user(current_subject())
    return json_response({"data": user_schema.dump(asdict(user))})


@bp.put("/profile")
@require_auth
@timing
def update_profile():
    data = profile_update_schema.load(_body())
    user = auth_service().update_profile(current_subject(), ProfileUpdateIn(**data))
    return json_response({"data": user_schema.dump(asdict(user))})


@bp.put("/profile/password")
@require_auth
@timing
def change_password():
    """Change the password after re-verifying the current one."""

    data = password_change_schema.load(_body())
    auth_service().change_password(current_subject(), PasswordChangeIn(**data))
    return json_response({"message": "Password updated"})


@bp.delete("/profile")
@require_auth
@timing
def delete_account():
    """Delete the account together with every log entry and image."""

    data = account_delete_schema.load(_body())
    auth_service().delete_account(current_subject(), data["password"])
    return "", 204
