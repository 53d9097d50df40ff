"""
Authentication blueprint:
- POST /api/auth/register
- POST /api/auth/login
- POST /api/auth/refresh
- POST /api/auth/logout
- GET  /api/auth/me

The work is done by IdentityService:
- argon2 password hashing
- short-lived access tokens and long-lived refresh tokens (separate secrets)
- refresh tokens recorded in the ledger so logout can revoke them
"""
from __future__ import annotations

from flask import Blueprint, g, request

from api.deps import get_identity_service
from api.responses import envelope
from models.schemas.user import (
    AuthResultOutSchema,
    IdentityOutSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
)
from utils.decorators import jwt_required

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_token_schema = RefreshTokenSchema()
auth_result_schema = AuthResultOutSchema()
identity_out_schema = IdentityOutSchema()


@bp.post("/register")
def register():
    """
    Register a new user and open a session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, password]
          properties:
            email: { type: string }
            password: { type: string, minLength: 6 }
            role: { type: string, enum: [user, admin], default: user }
    responses:
      201:
        description: Created (returns user and tokens)
      400:
        description: Duplicate email or validation error
    """
    data = register_schema.load(request.get_json(silent=True) or {})
    result = get_identity_service().register(data["email"], data["password"], data["role"])
    return envelope("User registered successfully", auth_result_schema.dump(result), 201)


@bp.post("/login")
def login():
    """
    Login: return the user plus access and refresh tokens
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns user and tokens)
      401:
        description: Invalid email or password
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    result = get_identity_service().login(data["email"], data["password"])
    return envelope("Login successful", auth_result_schema.dump(result))


@bp.post("/refresh")
def refresh():
    """
    Exchange a refresh token for a new access token (the refresh token is not rotated)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns accessToken)
      400:
        description: refreshToken missing
      401:
        description: Invalid or expired refresh token
    """
    data = refresh_token_schema.load(request.get_json(silent=True) or {})
    access = get_identity_service().refresh_access_token(data["refresh_token"])
    return envelope("Token refreshed successfully", {"accessToken": access})


@bp.post("/logout")
def logout():
    """
    Logout: revokes the refresh token. Unknown tokens are accepted.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: Logged out
      400:
        description: refreshToken missing
    """
    data = refresh_token_schema.load(request.get_json(silent=True) or {})
    get_identity_service().logout(data["refresh_token"])
    return envelope("Logout successful")


@bp.get("/me")
@jwt_required()
def me():
    """
    Identity carried by the access token.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Missing, malformed, invalid or expired token
    """
    return envelope("Authenticated", identity_out_schema.dump(g.identity))
