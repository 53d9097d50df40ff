from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from models.base_model import utcnow
from models.refresh_token import RefreshToken
from models.user import Role, User
from services.dto import AuthResult
from services.errors import (
    DuplicateEmailError,
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidTokenError,
    PersistenceError,
    UserNotFoundError,
    ValidationFailedError,
)
from services.identity import IdentityService


# ------------------------------- register ---------------------------------- #


def test_register_returns_sanitized_user_and_tokens(identity: IdentityService, signer):
    result = identity.register("a@x.com", "secret1")
    assert isinstance(result, AuthResult)
    assert result.user.email == "a@x.com"
    assert result.user.role is Role.USER
    assert result.user.created_at is not None
    assert not hasattr(result.user, "password_hash")

    claims = signer.verify_access_token(result.tokens.access_token)
    assert claims.user_id == result.user.id
    assert claims.role is Role.USER
    assert signer.verify_refresh_token(result.tokens.refresh_token).user_id == result.user.id


def test_register_stores_hash_not_plaintext(identity, storage):
    result = identity.register("a@x.com", "secret1")
    user = storage.get(User, result.user.id)
    assert user.password_hash != "secret1"
    assert "secret1" not in user.password_hash
    with pytest.raises(AttributeError):
        user.password


def test_register_records_refresh_token(identity, ledger):
    result = identity.register("a@x.com", "secret1")
    entry = ledger.find(result.tokens.refresh_token, result.user.id)
    assert entry is not None
    assert entry.expires_at is not None


def test_register_normalizes_email(identity):
    result = identity.register("  Mixed@X.com ", "secret1")
    assert result.user.email == "mixed@x.com"


def test_register_admin_role(identity, signer):
    result = identity.register("boss@x.com", "secret1", "admin")
    assert result.user.role is Role.ADMIN
    assert signer.verify_access_token(result.tokens.access_token).role is Role.ADMIN


@pytest.mark.parametrize(
    "password, role",
    [("secret1", "user"), ("different-password", "admin"), ("another", "user")],
)
def test_second_registration_always_fails(identity, password, role):
    identity.register("a@x.com", "secret1")
    with pytest.raises(DuplicateEmailError):
        identity.register("A@X.com", password, role)


@pytest.mark.parametrize(
    "email, password, role",
    [
        ("not-an-email", "secret1", "user"),
        ("a@x", "secret1", "user"),
        ("a@x.com", "short", "user"),
        ("a@x.com", "secret1", "root"),
        (None, "secret1", "user"),
    ],
)
def test_register_validates_input(identity, email, password, role):
    with pytest.raises(ValidationFailedError):
        identity.register(email, password, role)


# -------------------------------- login ------------------------------------ #


def test_login_issues_new_session_each_time(identity, ledger):
    reg = identity.register("a@x.com", "secret1")
    first = identity.login("a@x.com", "secret1")
    second = identity.login("A@x.com", "secret1")

    assert first.user.id == reg.user.id
    assert len({reg.tokens.refresh_token, first.tokens.refresh_token, second.tokens.refresh_token}) == 3
    assert ledger.count_for_user(reg.user.id) == 3


def test_login_failures_share_one_message(identity):
    identity.register("a@x.com", "secret1")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        identity.login("a@x.com", "wrong-password")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        identity.login("nobody@x.com", "secret1")

    assert str(wrong_password.value) == str(unknown_email.value) == "Invalid email or password"


# ------------------------------- refresh ----------------------------------- #


def test_refresh_issues_new_access_token(identity, signer):
    reg = identity.register("a@x.com", "secret1", "admin")
    access = identity.refresh_access_token(reg.tokens.refresh_token)
    claims = signer.verify_access_token(access)
    assert claims.user_id == reg.user.id
    assert claims.role is Role.ADMIN


def test_refresh_does_not_rotate(identity, ledger):
    reg = identity.register("a@x.com", "secret1")
    identity.refresh_access_token(reg.tokens.refresh_token)
    identity.refresh_access_token(reg.tokens.refresh_token)
    assert ledger.find(reg.tokens.refresh_token, reg.user.id) is not None


def test_refresh_rejects_access_token(identity):
    reg = identity.register("a@x.com", "secret1")
    with pytest.raises(InvalidTokenError):
        identity.refresh_access_token(reg.tokens.access_token)


def test_refresh_rejects_validly_signed_token_missing_from_ledger(identity, signer):
    reg = identity.register("a@x.com", "secret1")
    stray = signer.issue_refresh_token(reg.user.id)
    with pytest.raises(InvalidTokenError, match="Invalid refresh token"):
        identity.refresh_access_token(stray)


def test_refresh_after_logout_is_invalid_and_logout_is_idempotent(identity):
    reg = identity.register("a@x.com", "secret1")
    identity.logout(reg.tokens.refresh_token)

    with pytest.raises(InvalidTokenError):
        identity.refresh_access_token(reg.tokens.refresh_token)

    identity.logout(reg.tokens.refresh_token)  # no error
    identity.logout("never-issued")  # no error


def test_refresh_with_expired_ledger_entry_deletes_it(identity, storage, ledger):
    reg = identity.register("a@x.com", "secret1")
    entry = ledger.find(reg.tokens.refresh_token, reg.user.id)
    entry.expires_at = utcnow() - timedelta(minutes=1)
    storage.save()

    with pytest.raises(ExpiredTokenError, match="Refresh token has expired"):
        identity.refresh_access_token(reg.tokens.refresh_token)

    remaining = storage.get_session().scalars(
        select(RefreshToken).where(RefreshToken.token == reg.tokens.refresh_token)
    ).first()
    assert remaining is None


def test_refresh_fails_when_user_lookup_comes_back_empty(identity, monkeypatch):
    reg = identity.register("a@x.com", "secret1")
    # ledger row still present but the owner is gone (e.g. removed between the two reads)
    monkeypatch.setattr(identity.storage, "get", lambda cls, key: None)

    with pytest.raises(UserNotFoundError):
        identity.refresh_access_token(reg.tokens.refresh_token)


def test_deleting_user_cascades_its_refresh_tokens(identity, storage, ledger):
    reg = identity.register("a@x.com", "secret1")
    storage.delete(storage.get(User, reg.user.id))
    storage.save()

    assert ledger.count_for_user(reg.user.id) == 0
    with pytest.raises(InvalidTokenError, match="Invalid refresh token"):
        identity.refresh_access_token(reg.tokens.refresh_token)


def test_register_leaves_no_user_when_session_cannot_be_recorded(identity, storage, monkeypatch):
    def failing_record(*args, **kwargs):
        raise SQLAlchemyError("ledger unavailable")

    with monkeypatch.context() as m:
        m.setattr(identity.ledger, "record", failing_record)
        with pytest.raises(PersistenceError, match="Registration failed") as exc_info:
            identity.register("a@x.com", "secret1")
    assert exc_info.value.status_code == 500

    assert storage.count(User) == 0
    assert storage.count(RefreshToken) == 0
    # retrying is not blocked by a half-created account
    assert identity.register("a@x.com", "secret1").user.email == "a@x.com"
