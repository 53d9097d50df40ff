from __future__ import annotations

from datetime import timedelta

import pytest

from models.base_model import utcnow
from models.refresh_token import RefreshToken
from models.user import Role, User
from services.errors import DuplicateTokenError
from services.ledger import RefreshTokenLedger
from utils.security import hash_password


@pytest.fixture()
def users(storage):
    """Two persisted users: (alice, bob)."""
    alice = User(email="alice@x.com", password_hash=hash_password("secret1"), role=Role.USER)
    bob = User(email="bob@x.com", password_hash=hash_password("secret1"), role=Role.ADMIN)
    storage.new(alice)
    storage.new(bob)
    storage.save()
    return alice, bob


def _future(days: int = 7):
    return utcnow() + timedelta(days=days)


def test_record_and_find(ledger: RefreshTokenLedger, users):
    alice, _ = users
    entry = ledger.record("tok-1", alice.id, _future())
    found = ledger.find("tok-1", alice.id)
    assert found is not None
    assert found.id == entry.id
    assert found.user_id == alice.id


def test_record_duplicate_token_fails(ledger, users):
    alice, bob = users
    ledger.record("tok-1", alice.id, _future())
    with pytest.raises(DuplicateTokenError):
        ledger.record("tok-1", bob.id, _future())
    # first entry untouched
    assert ledger.find("tok-1", alice.id) is not None
    assert ledger.find("tok-1", bob.id) is None


def test_find_requires_matching_user(ledger, users):
    alice, bob = users
    ledger.record("tok-1", alice.id, _future())
    assert ledger.find("tok-1", bob.id) is None
    assert ledger.find("tok-2", alice.id) is None


def test_delete_by_token_is_idempotent(ledger, users):
    alice, _ = users
    ledger.record("tok-1", alice.id, _future())
    assert ledger.delete_by_token("tok-1") == 1
    assert ledger.delete_by_token("tok-1") == 0
    assert ledger.find("tok-1", alice.id) is None


def test_delete_by_id(ledger, users):
    alice, _ = users
    entry = ledger.record("tok-1", alice.id, _future())
    assert ledger.delete_by_id(entry.id) is True
    assert ledger.delete_by_id(entry.id) is False


def test_count_for_user(ledger, users):
    alice, bob = users
    ledger.record("tok-1", alice.id, _future())
    ledger.record("tok-2", alice.id, _future())
    ledger.record("tok-3", bob.id, _future())
    assert ledger.count_for_user(alice.id) == 2
    assert ledger.count_for_user(bob.id) == 1


def test_purge_expired_only_drops_past_entries(ledger, storage, users):
    alice, _ = users
    ledger.record("old", alice.id, utcnow() - timedelta(seconds=1))
    ledger.record("live", alice.id, _future())

    assert ledger.purge_expired() == 1
    remaining = [t.token for t in storage.all(RefreshToken)]
    assert remaining == ["live"]
