"""Unit tests for the :class:`User` model."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import InvalidRequestError

from tests.factories.user import UserFactory
from yuroku.models.user import User


def test_password_is_hashed_and_write_only(session):
    user = UserFactory(password="secret123")

    assert user.password_hash
    assert "secret123" not in user.password_hash
    assert user.verify_password("secret123")
    assert not user.verify_password("Secret123")
    with pytest.raises(AttributeError):
        _ = user.password


def test_email_is_normalized(session):
    user = UserFactory(email="  Mixed.Case@Example.COM ")
    assert user.email == "mixed.case@example.com"


@pytest.mark.parametrize("email", ["", "no-at-sign", "user@nodot"])
def test_invalid_email_is_rejected(email):
    with pytest.raises(ValueError):
        User(name="x", email=email)


def test_blank_name_is_rejected():
    with pytest.raises(ValueError):
        User(name="   ", email="a@example.com")


def test_empty_password_is_rejected():
    user = User(name="a", email="a@example.com")
    with pytest.raises(ValueError):
        user.password = ""


def test_log_entries_are_never_lazy_loaded(session):
    user = UserFactory()
    session.flush()
    session.expire(user, ["log_entries"])

    with pytest.raises(InvalidRequestError):
        _ = user.log_entries
