from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from models.user import Role
from services.errors import (
    ExpiredTokenError,
    ForbiddenError,
    InvalidTokenError,
    MalformedHeaderError,
    MissingTokenError,
    UnauthenticatedError,
)
from utils.decorators import authenticate_request, require_role
from utils.security import AccessClaims, TokenSigner


@pytest.fixture()
def token_signer():
    return TokenSigner(access_secret="a-secret", refresh_secret="r-secret")


# ------------------------- request authentication -------------------------- #


@pytest.mark.parametrize("header", [None, ""])
def test_missing_header(token_signer, header):
    with pytest.raises(MissingTokenError, match="Access token is required"):
        authenticate_request(header, token_signer)


@pytest.mark.parametrize(
    "header",
    ["Token abc", "Bearer", "Bearer ", "bearer abc", "Bearer a b", "abc"],
)
def test_malformed_header(token_signer, header):
    with pytest.raises(MalformedHeaderError):
        authenticate_request(header, token_signer)


def test_valid_header_returns_claims(token_signer):
    token = token_signer.issue_access_token("u-1", Role.ADMIN)
    claims = authenticate_request(f"Bearer {token}", token_signer)
    assert claims == AccessClaims(user_id="u-1", role=Role.ADMIN)


def test_expired_and_invalid_are_distinguishable(token_signer):
    stale_signer = TokenSigner(
        access_secret="a-secret",
        refresh_secret="r-secret",
        clock=lambda: datetime.now(timezone.utc) - timedelta(hours=1),
    )
    expired = stale_signer.issue_access_token("u-1", Role.USER)
    with pytest.raises(ExpiredTokenError) as expired_exc:
        authenticate_request(f"Bearer {expired}", token_signer)

    refresh = token_signer.issue_refresh_token("u-1")
    with pytest.raises(InvalidTokenError) as invalid_exc:
        authenticate_request(f"Bearer {refresh}", token_signer)

    assert str(expired_exc.value) != str(invalid_exc.value)


# ------------------------------- role gate --------------------------------- #


def test_role_gate_without_identity_is_unauthenticated():
    with pytest.raises(UnauthenticatedError, match="Authentication required"):
        require_role(None, [Role.ADMIN])


def test_role_gate_rejects_role_outside_allowed_set():
    with pytest.raises(ForbiddenError, match="Admin privileges required"):
        require_role(AccessClaims("u-1", Role.USER), [Role.ADMIN])


def test_role_gate_accepts_any_allowed_role():
    user = AccessClaims("u-1", Role.USER)
    admin = AccessClaims("u-2", Role.ADMIN)
    assert require_role(user, [Role.USER, Role.ADMIN]) is user
    assert require_role(admin, ["admin"]) is admin


def test_role_gate_with_empty_allowed_set_rejects_everyone():
    with pytest.raises(ForbiddenError):
        require_role(AccessClaims("u-2", Role.ADMIN), [])
