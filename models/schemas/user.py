from marshmallow import Schema, fields, pre_load, validate

from models.schemas.common import norm_email
from models.user import Role


class RegisterSchema(Schema):
    email = fields.Email(required=True, error_messages={"invalid": "Please provide a valid email"})
    password = fields.String(
        required=True,
        load_only=True,
        validate=validate.Length(min=6, error="Password must be at least 6 characters long"),
    )
    role = fields.String(
        load_default=Role.USER.value,
        validate=validate.OneOf([r.value for r in Role], error="Role must be either user or admin"),
    )

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=norm_email(data["email"]))
        return data


class LoginSchema(Schema):
    email = fields.Email(required=True, error_messages={"invalid": "Please provide a valid email"})
    password = fields.String(
        required=True,
        load_only=True,
        validate=validate.Length(min=1, error="Password is required"),
    )

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=norm_email(data["email"]))
        return data


class RefreshTokenSchema(Schema):
    """Body of /auth/refresh and /auth/logout."""

    refresh_token = fields.String(
        required=True,
        data_key="refreshToken",
        validate=validate.Length(min=1, error="Refresh token is required"),
        error_messages={"required": "Refresh token is required"},
    )


class UserOutSchema(Schema):
    id = fields.String()
    email = fields.String()
    role = fields.Function(lambda obj: Role(obj.role).value)
    created_at = fields.DateTime(data_key="createdAt")


class TokenPairOutSchema(Schema):
    access_token = fields.String(data_key="accessToken")
    refresh_token = fields.String(data_key="refreshToken")


class AuthResultOutSchema(Schema):
    user = fields.Nested(UserOutSchema)
    tokens = fields.Nested(TokenPairOutSchema)


class IdentityOutSchema(Schema):
    user_id = fields.String(data_key="userId")
    role = fields.Function(lambda obj: Role(obj.role).value)
