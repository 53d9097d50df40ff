from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from models.base_model import as_utc
from models.user import Role, User

# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserView:
    """
    Sanitized user representation; the password hash never leaves the service.

    :param id: User id.
    :param email: Normalized email.
    :param role: User role.
    :param created_at: Registration timestamp.
    """

    id: str
    email: str
    role: Role
    created_at: datetime

    @classmethod
    def from_model(cls, user: User) -> "UserView":
        return cls(id=user.id, email=user.email, role=Role(user.role), created_at=as_utc(user.created_at))


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Access and refresh tokens issued together at register/login.

    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT (also recorded in the ledger).
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class AuthResult:
    user: UserView
    tokens: TokenPair


@dataclass(frozen=True, slots=True)
class OrderLine:
    """One purchased item as snapshotted into an order."""

    sweet_id: str
    name: str
    quantity: int
    price: Decimal


@dataclass(frozen=True, slots=True)
class SalesSummary:
    orders: list
    total_revenue: Decimal
    total_orders: int
