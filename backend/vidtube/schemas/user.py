"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields


class RegisterSchema(Schema):
    """Text fields of the multipart registration form.

    Blank checks happen in the service so every missing field is reported in
    one message.
    """

    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(data_key="fullName", load_default=None, allow_none=True)
    email = fields.String(load_default=None, allow_none=True)
    username = fields.String(load_default=None, allow_none=True)
    password = fields.String(load_default=None, allow_none=True)


class UpdateAccountSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(data_key="fullName", load_default=None, allow_none=True)
    email = fields.String(load_default=None, allow_none=True)
    username = fields.String(load_default=None, allow_none=True)


class UserSchema(Schema):
    """Public representation of a user; never includes secrets."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.String(required=True)
    full_name = fields.String(data_key="fullName", required=True)
    avatar = fields.String(required=True)
    cover_image = fields.String(data_key="coverImage", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    updated_at = fields.DateTime(data_key="updatedAt", allow_none=True)
