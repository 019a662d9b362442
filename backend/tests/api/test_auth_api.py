from __future__ import annotations

import pytest

from tests.helpers.auth import TEST_PASSWORD, bearer, expired_token, issue_token
from yuroku.core.config import TestingConfig
from yuroku.core.extensions import limiter
from yuroku.factory import create_app
from yuroku.services._shared.ports.token_provider import REFRESH_TOKEN_TYPE

BASE = "/api/v1/auth"


def _register(client, email="alice@example.com", password="alicepass1", name="Alice"):
    return client.post(
        f"{BASE}/register", json={"name": name, "email": email, "password": password}
    )


def _login(client, email="alice@example.com", password="alicepass1"):
    return client.post(f"{BASE}/login", json={"email": email, "password": password})


# ------------------------------ Register ---------------------------------- #
class TestRegister:
    def test_register_returns_user_without_secrets(self, client):
        resp = _register(client, email="Alice@Example.COM")

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["email"] == "alice@example.com"
        assert data["name"] == "Alice"
        assert "password" not in data and "password_hash" not in data

    def test_duplicate_email_conflicts(self, client):
        assert _register(client).status_code == 201

        resp = _register(client, email="ALICE@example.com")

        assert resp.status_code == 409
        assert resp.mimetype == "application/problem+json"
        assert resp.get_json()["code"] == "duplicate_entity"

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "a@example.com", "password": "abcdefg1"},
            {"name": "A", "email": "not-an-email", "password": "abcdefg1"},
            {"name": "A", "email": "a@example.com"},
        ],
    )
    def test_invalid_payload(self, client, payload):
        resp = client.post(f"{BASE}/register", json=payload)

        assert resp.status_code == 422
        assert resp.get_json()["code"] == "validation_error"

    def test_weak_password(self, client):
        resp = _register(client, password="short1")

        assert resp.status_code == 422
        assert resp.get_json()["details"] == {"field": "password"}


# -------------------------------- Login ----------------------------------- #
class TestLogin:
    def test_login_returns_token_pair(self, client):
        _register(client)

        resp = _login(client, email="ALICE@example.com")

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["user"]["email"] == "alice@example.com"
        assert data["access_token"] and data["refresh_token"]
        assert data["token_type"] == "Bearer"
        assert data["expires_in"] == 15 * 60

    @pytest.mark.parametrize(
        ("email", "password"),
        [("alice@example.com", "wrongpass1"), ("nobody@example.com", "alicepass1")],
    )
    def test_bad_credentials_are_indistinguishable(self, client, email, password):
        _register(client)

        resp = _login(client, email=email, password=password)

        assert resp.status_code == 401
        body = resp.get_json()
        assert body["code"] == "authentication_error"
        assert body["detail"] == "Invalid credentials"


# --------------------------- Refresh / logout ----------------------------- #
class TestTokens:
    def test_refresh_rotates_tokens(self, client):
        _register(client)
        tokens = _login(client).get_json()["data"]

        resp = client.post(f"{BASE}/refresh", json={"refreshToken": tokens["refresh_token"]})
        assert resp.status_code == 200
        fresh = resp.get_json()["data"]
        assert fresh["refresh_token"] != tokens["refresh_token"]

        profile = client.get(f"{BASE}/profile", headers=bearer(fresh["access_token"]))
        assert profile.status_code == 200
        assert profile.get_json()["data"]["email"] == "alice@example.com"

        replay = client.post(f"{BASE}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert replay.status_code == 401
        assert replay.get_json()["code"] == "invalid_token"

    def test_refresh_rejects_access_token(self, client):
        _register(client)
        tokens = _login(client).get_json()["data"]

        resp = client.post(f"{BASE}/refresh", json={"refresh_token": tokens["access_token"]})

        assert resp.status_code == 401

    def test_logout_revokes_both_tokens(self, client):
        _register(client)
        tokens = _login(client).get_json()["data"]
        headers = bearer(tokens["access_token"])

        resp = client.post(
            f"{BASE}/logout", json={"refresh_token": tokens["refresh_token"]}, headers=headers
        )
        assert resp.status_code == 200

        again = client.get(f"{BASE}/profile", headers=headers)
        assert again.status_code == 401
        assert again.get_json()["code"] == "invalid_token"

        refreshed = client.post(f"{BASE}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert refreshed.status_code == 401

    def test_failed_logout_keeps_session_usable(self, client):
        _register(client)
        tokens = _login(client).get_json()["data"]
        headers = bearer(tokens["access_token"])

        resp = client.post(f"{BASE}/logout", json={"refresh_token": "garbage"}, headers=headers)
        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_token"

        profile = client.get(f"{BASE}/profile", headers=headers)
        assert profile.status_code == 200


# ------------------------------ Rate limit -------------------------------- #
@pytest.fixture()
def limited_client(session, tmp_path):
    """Client for an app with login throttling switched on (2 per minute)."""

    class LimitedConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
        UPLOAD_DIR = str(tmp_path / "uploads")
        LOG_LEVEL = "WARNING"
        RATELIMIT_ENABLED = True
        RATELIMIT_STORAGE_URI = "memory://"
        AUTH_LOGIN_RATE_LIMIT = "2 per minute"

    was_enabled = limiter.enabled
    limited = create_app(LimitedConfig)
    try:
        with limited.app_context():
            yield limited.test_client()
    finally:
        limiter.reset()
        limiter.enabled = was_enabled


class TestLoginRateLimit:
    def test_third_login_within_a_minute_is_throttled(self, limited_client):
        payload = {"email": "nobody@example.com", "password": "wrongpass1"}
        statuses = [
            limited_client.post(f"{BASE}/login", json=payload).status_code for _ in range(2)
        ]
        assert statuses == [401, 401]

        resp = limited_client.post(f"{BASE}/login", json=payload)

        assert resp.status_code == 429
        assert resp.mimetype == "application/problem+json"
        assert resp.get_json()["code"] == "too_many_requests"


# ----------------------------- Middleware --------------------------------- #
class TestBearerMiddleware:
    def test_missing_header(self, client):
        resp = client.get(f"{BASE}/profile")

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "missing_token"

    @pytest.mark.parametrize("header", ["Token abc", "Bearer", "Bearer a b"])
    def test_malformed_header(self, client, header):
        resp = client.get(f"{BASE}/profile", headers={"Authorization": header})

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_token_format"

    def test_expired_token(self, app, client, user):
        with app.app_context():
            token = expired_token(user.id)

        resp = client.get(f"{BASE}/profile", headers=bearer(token))

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "token_expired"

    def test_garbage_token(self, client):
        resp = client.get(f"{BASE}/profile", headers=bearer("not.a.jwt"))

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_token"

    def test_refresh_token_is_accepted_as_bearer(self, app, client, user):
        with app.app_context():
            token = issue_token(user.id, REFRESH_TOKEN_TYPE)

        resp = client.get(f"{BASE}/profile", headers=bearer(token))

        assert resp.status_code == 200
        assert resp.get_json()["data"]["id"] == user.id

    def test_optional_auth_on_health(self, client, auth_header):
        assert client.get("/api/v1/health", headers=auth_header).get_json()["authenticated"]
        assert client.get(
            "/api/v1/health", headers={"Authorization": "Bearer junk"}
        ).get_json()["authenticated"] is False


# ------------------------------- Profile ---------------------------------- #
class TestProfile:
    def test_get_profile(self, client, user, auth_header):
        resp = client.get(f"{BASE}/profile", headers=auth_header)

        assert resp.status_code == 200
        assert resp.get_json()["data"]["email"] == user.email

    def test_update_profile(self, client, auth_header):
        resp = client.put(
            f"{BASE}/profile", json={"name": "Onsen Fan", "email": "Fan@Example.com"}, headers=auth_header
        )

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert (data["name"], data["email"]) == ("Onsen Fan", "fan@example.com")

    def test_update_profile_email_taken(self, client, session, user, auth_header):
        from tests.factories.user import UserFactory

        other = UserFactory()
        session.commit()

        resp = client.put(f"{BASE}/profile", json={"email": other.email}, headers=auth_header)

        assert resp.status_code == 409

    def test_change_password(self, client, session, user, auth_header):
        session.commit()

        wrong = client.put(
            f"{BASE}/profile/password",
            json={"currentPassword": "nope", "newPassword": "newpass123"},
            headers=auth_header,
        )
        assert wrong.status_code == 401

        ok = client.put(
            f"{BASE}/profile/password",
            json={"current_password": TEST_PASSWORD, "new_password": "newpass123"},
            headers=auth_header,
        )
        assert ok.status_code == 200
        assert _login(client, email=user.email, password="newpass123").status_code == 200

    def test_delete_account(self, client, session, user, auth_header):
        session.commit()

        refused = client.delete(f"{BASE}/profile", json={"password": "wrong"}, headers=auth_header)
        assert refused.status_code == 401

        resp = client.delete(f"{BASE}/profile", json={"password": TEST_PASSWORD}, headers=auth_header)
        assert resp.status_code == 204

        assert _login(client, email=user.email, password=TEST_PASSWORD).status_code == 401
