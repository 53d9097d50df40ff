# services/identity.py
from __future__ import annotations

import logging
import re

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.base_model import as_utc
from models.db_storage import DBStorage
from models.user import Role, User
from services.dto import AuthResult, TokenPair, UserView
from services.errors import (
    DuplicateEmailError,
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidTokenError,
    PersistenceError,
    ServiceError,
    UserNotFoundError,
    ValidationFailedError,
)
from services.ledger import RefreshTokenLedger
from utils.security import TokenSigner, hash_password, verify_password

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str) -> str:
    return email.strip().lower() if isinstance(email, str) else email


class IdentityService:
    """
    Authentication lifecycle: register / login / refresh / logout.

    Access tokens are verified statelessly by the signer. Refresh tokens
    are additionally recorded in the ledger; a refresh is honoured only
    while its ledger entry exists and has not expired. Refresh tokens are
    not rotated: refreshing mints a new access token and leaves the
    refresh token untouched until it expires or the session logs out.
    """

    def __init__(
        self,
        *,
        storage: DBStorage,
        signer: TokenSigner,
        ledger: RefreshTokenLedger | None = None,
    ) -> None:
        """
        :param storage: Persistence handle shared with the ledger.
        :param signer: Issues and verifies access/refresh tokens.
        :param ledger: Refresh token ledger; built on ``storage`` when omitted.
        """
        self.storage = storage
        self.signer = signer
        self.ledger = ledger or RefreshTokenLedger(storage)

    @property
    def session(self):
        return self.storage.get_session()

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, email: str, password: str, role: Role | str = Role.USER) -> AuthResult:
        """
        Create a user and open a first session.

        :raises ValidationFailedError: malformed email, short password or unknown role.
        :raises DuplicateEmailError: email already registered (case-insensitive).
        """
        email = normalize_email(email)
        role = self._validate_registration(email, password, role)

        if self._find_by_email(email) is not None:
            logger.warning("registration rejected: duplicate email")
            raise DuplicateEmailError()

        # hash first, then persist the user and its first session in one commit
        user = User(email=email, password_hash=hash_password(password), role=role)
        self.storage.new(user)
        try:
            tokens = self._issue_tokens(user, commit=False)
            self.storage.save()
        except IntegrityError:
            self.storage.rollback()
            raise DuplicateEmailError()
        except SQLAlchemyError as exc:
            self.storage.rollback()
            logger.exception("registration failed", exc_info=exc)
            raise PersistenceError("Registration failed")
        except ServiceError:
            self.storage.rollback()
            raise

        logger.info("user registered id=%s role=%s", user.id, role.value)
        return AuthResult(user=UserView.from_model(user), tokens=tokens)

    @staticmethod
    def _validate_registration(email: str, password: str, role: Role | str) -> Role:
        if not isinstance(email, str) or not EMAIL_RE.match(email):
            raise ValidationFailedError("Please provide a valid email")
        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailedError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        try:
            return Role(role if role is not None else Role.USER)
        except ValueError:
            allowed = ", ".join(r.value for r in Role)
            raise ValidationFailedError(f"Role must be one of: {allowed}")

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, email: str, password: str) -> AuthResult:
        """
        Verify credentials and open a new session. Earlier sessions stay valid.

        :raises InvalidCredentialsError: same message for unknown email and wrong password.
        """
        user = self._find_by_email(normalize_email(email)) if isinstance(email, str) else None
        if user is None or not isinstance(password, str) or not verify_password(password, user.password_hash):
            logger.warning("login failed")
            raise InvalidCredentialsError()

        logger.info("user logged in id=%s", user.id)
        return self._authenticated(user)

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh_access_token(self, refresh_token: str) -> str:
        """
        Exchange a live refresh token for a new access token.

        :raises ExpiredTokenError: token or ledger entry past its expiry.
        :raises InvalidTokenError: bad signature or no matching ledger entry.
        :raises UserNotFoundError: the owner no longer exists.
        """
        claims = self.signer.verify_refresh_token(refresh_token)

        try:
            entry = self.ledger.find(refresh_token, claims.user_id)
            if entry is None:
                raise InvalidTokenError("Invalid refresh token")

            # the ledger is the authority once consulted
            if as_utc(entry.expires_at) <= self.signer.now():
                self.ledger.delete_by_id(entry.id)
                raise ExpiredTokenError("Refresh token has expired")

            user = self.storage.get(User, claims.user_id)
        except SQLAlchemyError as exc:
            self.storage.rollback()
            logger.exception("refresh lookup failed", exc_info=exc)
            raise PersistenceError("Token refresh failed")

        if user is None:
            raise UserNotFoundError()

        logger.info("access token refreshed id=%s", user.id)
        return self.signer.issue_access_token(user.id, user.role)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, refresh_token: str) -> None:
        """Revoke a refresh token. Unknown tokens are ignored."""
        try:
            removed = self.ledger.delete_by_token(refresh_token)
        except SQLAlchemyError as exc:
            self.storage.rollback()
            logger.exception("logout failed", exc_info=exc)
            raise PersistenceError("Logout failed")
        logger.info("logout removed=%d", removed)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _find_by_email(self, email: str) -> User | None:
        return self.session.scalars(select(User).where(User.email == email)).first()

    def _issue_tokens(self, user: User, *, commit: bool = True) -> TokenPair:
        access = self.signer.issue_access_token(user.id, user.role)
        refresh = self.signer.issue_refresh_token(user.id)
        self.ledger.record(refresh, user.id, self.signer.compute_refresh_expiry(), commit=commit)
        return TokenPair(access_token=access, refresh_token=refresh)

    def _authenticated(self, user: User) -> AuthResult:
        try:
            tokens = self._issue_tokens(user)
        except SQLAlchemyError as exc:
            logger.exception("refresh token could not be recorded", exc_info=exc)
            raise PersistenceError("Could not open session")
        return AuthResult(user=UserView.from_model(user), tokens=tokens)
