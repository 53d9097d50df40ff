"""Refresh token ledger: persisted record of every issued refresh token."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from models.base_model import utcnow
from models.db_storage import DBStorage
from models.refresh_token import RefreshToken
from services.errors import DuplicateTokenError

logger = logging.getLogger(__name__)


class RefreshTokenLedger:
    """
    Thin data-access wrapper around the ``refresh_tokens`` table.

    The unique constraint on ``token`` is the only concurrency guard; a
    collision surfaces as :class:`DuplicateTokenError`, never as an overwrite.
    """

    def __init__(self, storage: DBStorage) -> None:
        self.storage = storage

    @property
    def session(self):
        return self.storage.get_session()

    def record(self, token: str, user_id: str, expires_at: datetime, *, commit: bool = True) -> RefreshToken:
        """With ``commit=False`` the entry is only added; the caller commits it."""
        if self.session.scalar(select(RefreshToken.id).where(RefreshToken.token == token)):
            raise DuplicateTokenError()

        entry = RefreshToken(token=token, user_id=user_id, expires_at=expires_at)
        self.storage.new(entry)
        if not commit:
            return entry
        try:
            self.storage.save()
        except IntegrityError:
            # lost a race against an identical insert
            raise DuplicateTokenError()
        return entry

    def find(self, token: str, user_id: str) -> RefreshToken | None:
        """Exact match on both the token string and its owner."""
        stmt = select(RefreshToken).where(
            RefreshToken.token == token,
            RefreshToken.user_id == user_id,
        )
        return self.session.scalars(stmt).first()

    def delete_by_token(self, token: str) -> int:
        result = self.session.execute(delete(RefreshToken).where(RefreshToken.token == token))
        self.storage.save()
        return result.rowcount or 0

    def delete_by_id(self, entry_id: str) -> bool:
        result = self.session.execute(delete(RefreshToken).where(RefreshToken.id == entry_id))
        self.storage.save()
        return bool(result.rowcount)

    def count_for_user(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(RefreshToken).where(RefreshToken.user_id == user_id)
        return int(self.session.scalar(stmt) or 0)

    def purge_expired(self, now: datetime | None = None) -> int:
        """Passive expiry sweep: drop every entry whose expires_at has passed."""
        cutoff = now or utcnow()
        result = self.session.execute(delete(RefreshToken).where(RefreshToken.expires_at <= cutoff))
        self.storage.save()
        purged = result.rowcount or 0
        if purged:
            logger.info("purged %d expired refresh tokens", purged)
        return purged
