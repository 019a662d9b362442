"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .common import CamelCaseAliasSchema


class RegisterSchema(Schema):
    """Input payload for account registration."""

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(max=128))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(CamelCaseAliasSchema):
    ALIASES = {"refreshToken": "refresh_token"}

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class LogoutSchema(CamelCaseAliasSchema):
    ALIASES = {"refreshToken": "refresh_token"}

    refresh_token = fields.String(load_default=None)


class ProfileUpdateSchema(Schema):
    """Partial profile update; at least one field is expected."""

    name = fields.String(validate=validate.Length(min=1, max=100))
    email = fields.Email(validate=validate.Length(max=254))


class PasswordChangeSchema(CamelCaseAliasSchema):
    ALIASES = {"currentPassword": "current_password", "newPassword": "new_password"}

    current_password = fields.String(required=True)
    new_password = fields.String(required=True, validate=validate.Length(max=128))


class AccountDeleteSchema(Schema):
    password = fields.String(required=True)


class UserSchema(Schema):
    """Public user representation."""

    id = fields.Integer(required=True)
    name = fields.String(required=True)
    email = fields.Email(required=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class TokenResponseSchema(Schema):
    """Response payload containing an access/refresh token pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(dump_default="Bearer")
    expires_in = fields.Integer()
