"""Session-related request/response schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields

from .user import UserSchema


class LoginSchema(Schema):
    """Credentials payload; either ``email`` or ``username`` identifies the user."""

    class Meta:
        unknown = EXCLUDE

    email = fields.String(load_default=None, allow_none=True)
    username = fields.String(load_default=None, allow_none=True)
    password = fields.String(load_default=None, allow_none=True)


class RefreshTokenSchema(Schema):
    """Body fallback for clients that do not send the refresh cookie."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(data_key="refreshToken", load_default=None, allow_none=True)


class ChangePasswordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    old_password = fields.String(data_key="oldPassword", load_default=None, allow_none=True)
    new_password = fields.String(data_key="newPassword", load_default=None, allow_none=True)


class TokenPairSchema(Schema):
    access_token = fields.String(data_key="accessToken", required=True)
    refresh_token = fields.String(data_key="refreshToken", required=True)


class LoginResultSchema(TokenPairSchema):
    """Login response body: stripped user plus both tokens."""

    user = fields.Nested(UserSchema, required=True)
