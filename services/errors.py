"""
Domain-level exceptions raised by the services and the request gates.

They carry the HTTP status the API layer answers with, but do not import
Flask; ``api/errors.py`` turns them into the JSON envelope.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for every expected failure of the service layer."""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailedError(ServiceError):
    default_message = "Validation failed"


class DuplicateEmailError(ServiceError):
    default_message = "User with this email already exists"


class DuplicateTokenError(ServiceError):
    status_code = 409
    default_message = "Refresh token already recorded"


class InsufficientStockError(ServiceError):
    default_message = "Insufficient quantity"


class InvalidCredentialsError(ServiceError):
    status_code = 401
    default_message = "Invalid email or password"


# --------------------------------------------------------------------------- #
# Token / request authentication
# --------------------------------------------------------------------------- #


class TokenError(ServiceError):
    status_code = 401
    default_message = "Invalid or expired token"


class ExpiredTokenError(TokenError):
    default_message = "Token has expired"


class InvalidTokenError(TokenError):
    default_message = "Invalid token"


class MissingTokenError(TokenError):
    default_message = "Access token is required"


class MalformedHeaderError(TokenError):
    default_message = "Invalid authorization header format. Use: Bearer <token>"


class UnauthenticatedError(ServiceError):
    status_code = 401
    default_message = "Authentication required"


class UserNotFoundError(ServiceError):
    status_code = 401
    default_message = "User not found"


class ForbiddenError(ServiceError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "Resource not found"


class PersistenceError(ServiceError):
    """The database refused or failed a write; nothing was committed."""

    status_code = 500
    default_message = "Internal server error"
