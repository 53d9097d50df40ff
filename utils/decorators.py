from __future__ import annotations

from functools import wraps
from typing import Iterable

from flask import current_app, g, request

from models.user import Role
from services.errors import ForbiddenError, MalformedHeaderError, MissingTokenError, UnauthenticatedError
from utils.security import AccessClaims, TokenSigner


def authenticate_request(header: str | None, signer: TokenSigner) -> AccessClaims:
    """
    Validate an ``Authorization: Bearer <token>`` header value and return
    the access claims. Never touches persistence.
    """
    if not header:
        raise MissingTokenError()
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise MalformedHeaderError()
    return signer.verify_access_token(parts[1])


def require_role(identity: AccessClaims | None, allowed: Iterable[Role | str]) -> AccessClaims:
    """Allow the identity through only if its role is in ``allowed``."""
    if identity is None:
        raise UnauthenticatedError()
    allowed_roles = {Role(r) for r in allowed}
    if identity.role not in allowed_roles:
        if allowed_roles == {Role.ADMIN}:
            raise ForbiddenError("Access denied. Admin privileges required")
        raise ForbiddenError("Access denied. Insufficient role")
    return identity


def jwt_required():
    """Attach the caller's {user_id, role} to ``g.identity`` or fail with 401."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            signer: TokenSigner = current_app.extensions["token_signer"]
            g.identity = authenticate_request(request.headers.get("Authorization"), signer)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(required_roles: list[Role | str]):
    """
    Allow access if the authenticated identity has ANY of the required roles.
    Must run after jwt_required(); without an identity the request is 401.
    """
    req = [Role(r) for r in required_roles or []]

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            require_role(getattr(g, "identity", None), req)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
