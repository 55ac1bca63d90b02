"""
DTOs for AccountService.

Inputs carry raw request values (blank checks happen in the service); outputs
never expose the password hash or the stored refresh token.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from vidtube.models.user import User

# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input payload for registration.

    :param full_name: Display name.
    :param email: Login email (normalized by the model).
    :param username: Public handle (case-folded by the model).
    :param password: Raw password (the model setter hashes it).
    :param avatar_path: Staged avatar file, required.
    :type avatar_path: Path | None
    :param cover_image_path: Staged cover file, optional.
    :type cover_image_path: Path | None
    """

    full_name: str | None
    email: str | None
    username: str | None
    password: str | None
    avatar_path: Path | None = None
    cover_image_path: Path | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login. Either identifier may be used.

    :param password: Raw password (to be verified).
    :param email: User email.
    :param username: User handle.
    """

    password: str | None
    email: str | None = None
    username: str | None = None


@dataclass(frozen=True, slots=True)
class ChangePasswordIn:
    user_id: int
    old_password: str | None
    new_password: str | None


@dataclass(frozen=True, slots=True)
class UpdateProfileIn:
    user_id: int
    full_name: str | None
    email: str | None
    username: str | None


# --------------------------------------------------------------------------- #
# Output
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Public-safe user payload.

    :param id: User identifier.
    :param username: Case-folded handle.
    :param email: Normalized email.
    :param full_name: Display name.
    :param avatar: Avatar URL.
    :param cover_image: Cover URL, if any.
    """

    id: int
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            avatar=user.avatar,
            cover_image=user.cover_image,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Result of a successful login.

    :param user: Stripped user payload.
    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT.
    """

    user: UserOut
    access_token: str
    refresh_token: str
