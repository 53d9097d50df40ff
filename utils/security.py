"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT, with separate secrets and lifetimes
  for access and refresh tokens
- lifetime strings such as "15m" / "7d"
"""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from models.user import Role
from services.errors import ExpiredTokenError, InvalidTokenError

ACCESS = "access"
REFRESH = "refresh"

_DURATION_RE = re.compile(r"^(\d+)([smhd])$")
_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}

ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2 (salted, adaptive)."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password against an Argon2 hash."""
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID)."""
    return uuid.uuid4().hex


def parse_duration(value: str) -> timedelta:
    """Parse "<integer><unit>" with unit in s, m, h, d."""
    match = _DURATION_RE.match((value or "").strip())
    if not match:
        raise ValueError(f"Invalid expiry format: {value}")
    amount, unit = int(match.group(1)), match.group(2)
    try:
        return timedelta(**{_UNITS[unit]: amount})
    except OverflowError:
        raise ValueError(f"Invalid expiry format: {value}")


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AccessClaims:
    user_id: str
    role: Role


@dataclass(frozen=True)
class RefreshClaims:
    user_id: str


class TokenSigner:
    """
    Issues and verifies the two token kinds.

    Access tokens carry {userId, role} and are verified statelessly on every
    request. Refresh tokens carry {userId} and a random jti; they are also
    recorded in the ledger so they can be revoked. Each kind has its own
    secret: a token of one kind never verifies as the other.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expiry: str = "15m",
        refresh_expiry: str = "7d",
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _now,
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh secrets are required")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must differ")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.access_interval = parse_duration(access_expiry)
        self.refresh_interval = parse_duration(refresh_expiry)
        self.algorithm = algorithm
        self._clock = clock

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "TokenSigner":
        return cls(
            access_secret=config["JWT_ACCESS_SECRET"],
            refresh_secret=config["JWT_REFRESH_SECRET"],
            access_expiry=config.get("JWT_ACCESS_EXPIRY", "15m"),
            refresh_expiry=config.get("JWT_REFRESH_EXPIRY", "7d"),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )

    def now(self) -> datetime:
        return self._clock()

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def _encode(self, claims: Dict[str, Any], secret: str, interval: timedelta) -> str:
        issued = self.now()
        payload = dict(claims)
        payload["iat"] = int(issued.timestamp())
        payload["exp"] = int((issued + interval).timestamp())
        payload["jti"] = generate_jti()
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def issue_access_token(self, user_id: str, role: Role | str) -> str:
        role = Role(role)
        return self._encode(
            {"userId": str(user_id), "role": role.value, "type": ACCESS},
            self._access_secret,
            self.access_interval,
        )

    def issue_refresh_token(self, user_id: str) -> str:
        return self._encode(
            {"userId": str(user_id), "type": REFRESH},
            self._refresh_secret,
            self.refresh_interval,
        )

    def compute_refresh_expiry(self) -> datetime:
        """Absolute expiry stored in the ledger; same interval as the token's exp."""
        return self.now() + self.refresh_interval

    # ------------------------------------------------------------------ #
    # Verify
    # ------------------------------------------------------------------ #

    def _decode(self, token: str, secret: str, expected_type: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT. Raises ExpiredTokenError when exp has passed,
        InvalidTokenError for anything else (signature, structure, type).
        """
        label = expected_type.capitalize()
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError(f"{label} token has expired")
        except jwt.InvalidTokenError:
            raise InvalidTokenError(f"Invalid {expected_type} token")

        if decoded.get("type") != expected_type or not decoded.get("userId"):
            raise InvalidTokenError(f"Invalid {expected_type} token")
        return decoded

    def verify_access_token(self, token: str) -> AccessClaims:
        decoded = self._decode(token, self._access_secret, ACCESS)
        try:
            role = Role(decoded.get("role"))
        except ValueError:
            raise InvalidTokenError("Invalid access token")
        return AccessClaims(user_id=str(decoded["userId"]), role=role)

    def verify_refresh_token(self, token: str) -> RefreshClaims:
        decoded = self._decode(token, self._refresh_secret, REFRESH)
        return RefreshClaims(user_id=str(decoded["userId"]))
