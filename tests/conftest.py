"""Pytest fixtures: a fresh app with an in-memory SQLite database per test."""

from __future__ import annotations

import pytest

from api import create_app
from api.config import TestingConfig


@pytest.fixture()
def app():
    """Flask application configured for testing; storage disposed afterwards."""
    app = create_app(TestingConfig)
    yield app
    app.extensions["storage"].dispose()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def storage(app):
    return app.extensions["storage"]


@pytest.fixture()
def signer(app):
    return app.extensions["token_signer"]


@pytest.fixture()
def identity(app):
    """The IdentityService wired to the test app's storage and signer."""
    return app.extensions["identity_service"]


@pytest.fixture()
def ledger(identity):
    return identity.ledger


@pytest.fixture()
def sweets(app):
    return app.extensions["sweet_service"]


@pytest.fixture()
def auth_header(signer):
    """Build an Authorization header for an arbitrary (user_id, role)."""

    def _make(user_id: str = "user-1", role: str = "user") -> dict:
        return {"Authorization": f"Bearer {signer.issue_access_token(user_id, role)}"}

    return _make


@pytest.fixture()
def register(client):
    """Register through the API and return the response's data block."""

    def _register(email: str = "a@x.com", password: str = "secret1", role: str = "user") -> dict:
        resp = client.post("/api/auth/register", json={"email": email, "password": password, "role": role})
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]

    return _register
