"""Marshmallow schemas for request validation and response serialization."""

from .auth import (
    ChangePasswordSchema,
    LoginResultSchema,
    LoginSchema,
    RefreshTokenSchema,
    TokenPairSchema,
)
from .channel import ChannelProfileSchema, VideoOwnerSchema, WatchedVideoSchema
from .user import RegisterSchema, UpdateAccountSchema, UserSchema

__all__ = [
    "ChangePasswordSchema",
    "ChannelProfileSchema",
    "LoginResultSchema",
    "LoginSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "UpdateAccountSchema",
    "UserSchema",
    "VideoOwnerSchema",
    "WatchedVideoSchema",
]
