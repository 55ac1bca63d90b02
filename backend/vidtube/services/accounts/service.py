# vidtube/services/accounts/service.py
from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy.exc import IntegrityError

from vidtube.models.user import User
from vidtube.services._shared.base import BaseService, ServiceContext
from vidtube.services._shared.errors import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    InternalServiceError,
    NotFoundError,
    violates,
)
from vidtube.services._shared.ports import MediaStore, MediaStoreError
from vidtube.services.accounts.dto import (
    ChangePasswordIn,
    LoginIn,
    LoginOut,
    RegisterIn,
    UpdateProfileIn,
    UserOut,
)
from vidtube.services.auth.dto import RefreshIn, TokenPairOut
from vidtube.services.auth.service import TokenService

log = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "User with email or username already exists"


def _is_duplicate_user(exc: IntegrityError) -> bool:
    return violates(exc, "uq_users_email") or violates(exc, "uq_users_username")


class AccountService(BaseService):
    """
    Account lifecycle over a single user row.

    An account moves from registered (no stored refresh token) to
    authenticated (one stored refresh token) on login or refresh, and back to
    logged out when the token is cleared by logout or a password change.
    Profile and media updates leave the session state untouched.
    """

    def __init__(
        self,
        *,
        tokens: TokenService,
        media: MediaStore,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param tokens: Token lifecycle service used by login and refresh.
        :param media: Object store hosting avatar and cover images.
        """
        super().__init__(ctx=ctx)
        self.tokens = tokens
        self.media = media

    # ------------------------------------------------------------------ #
    # Registration & login
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserOut:
        """
        Create an account with a hosted avatar (and optional cover image).

        Validation and the duplicate check run before any upload. A failed
        cover upload is logged and the account is created without one.

        :param dto: Registration input.
        :returns: The created user, stripped of secrets.
        :raises BadRequestError: On blank fields, a missing avatar or a failed
            avatar upload.
        :raises ConflictError: If the email or username is taken.
        :raises InternalServiceError: If the created row cannot be read back.
        """
        self.require_text(
            full_name=dto.full_name,
            email=dto.email,
            username=dto.username,
            password=dto.password,
        )
        try:
            user = User(full_name=dto.full_name, email=dto.email, username=dto.username)
            user.password = dto.password or ""
        except ValueError as exc:
            raise BadRequestError(str(exc)) from exc

        with self.ro_uow() as uow:
            if uow.users.exists_by_email_or_username(email=user.email, username=user.username):
                raise ConflictError("User", DUPLICATE_USER_MESSAGE)

        if dto.avatar_path is None:
            raise BadRequestError("Avatar file is required")
        try:
            user.avatar = self.media.upload(dto.avatar_path)
        except MediaStoreError as exc:
            log.warning("media.avatar_upload_failed: %s", exc)
            raise BadRequestError("Failed to upload avatar") from exc

        if dto.cover_image_path is not None:
            try:
                user.cover_image = self.media.upload(dto.cover_image_path)
            except MediaStoreError as exc:
                log.warning("media.cover_upload_failed: %s", exc)

        with self.rw_uow() as uow:
            try:
                uow.users.add(user)
            except IntegrityError as exc:
                if _is_duplicate_user(exc):
                    raise ConflictError("User", DUPLICATE_USER_MESSAGE) from exc
                raise
            user_id = user.id

        with self.ro_uow() as uow:
            created = uow.users.get(user_id)
            if created is None:
                raise InternalServiceError("Something went wrong while registering the user")
            out = UserOut.from_model(created)
        log.info("user.registered", extra={"user_id": user_id})
        return out

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Verify credentials and open a session.

        :raises BadRequestError: If neither email nor username is given.
        :raises NotFoundError: If no user matches.
        :raises AuthenticationError: If the password does not match.
        """
        email = (dto.email or "").strip()
        username = (dto.username or "").strip()
        if not email and not username:
            raise BadRequestError("Username or email is required")

        with self.ro_uow() as uow:
            user = uow.users.find_by_email_or_username(email=email, username=username)
            if user is None:
                raise NotFoundError("User", email or username)
            if not user.verify_password(dto.password):
                log.warning("auth.login_failed", extra={"user_id": user.id})
                raise AuthenticationError("Invalid user credentials")
            user_id = user.id

        pair = self.tokens.issue_token_pair(user_id)
        # Re-read so the payload reflects the committed row.
        out = self.get_current_user(user_id)
        log.info("user.logged_in", extra={"user_id": user_id})
        return LoginOut(user=out, access_token=pair.access_token, refresh_token=pair.refresh_token)

    def logout(self, user_id: int) -> None:
        """Clear the stored refresh token. Safe to call repeatedly."""
        with self.rw_uow() as uow:
            uow.users.clear_refresh_token(user_id)
        log.info("user.logged_out", extra={"user_id": user_id})

    def refresh_session(self, refresh_token: str | None) -> TokenPairOut:
        """Rotate the caller's refresh token; see :meth:`TokenService.refresh`."""
        return self.tokens.refresh(RefreshIn(refresh_token=refresh_token))

    # ------------------------------------------------------------------ #
    # Credentials & profile
    # ------------------------------------------------------------------ #

    def change_password(self, dto: ChangePasswordIn) -> None:
        """
        Replace the password after verifying the current one.

        The stored refresh token is cleared too, so other sessions must log in
        again once their access token expires.
        """
        new_password = dto.new_password or ""
        if not new_password.strip():
            raise BadRequestError("New password is required")

        with self.rw_uow() as uow:
            user = uow.users.get(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)
            if not user.verify_password(dto.old_password):
                raise AuthenticationError("Invalid old password")
            uow.users.update_password(user, new_password)
            uow.users.clear_refresh_token(user.id)
        log.info("user.password_changed", extra={"user_id": dto.user_id})

    def get_current_user(self, user_id: int) -> UserOut:
        """
        Load the public view of a user.

        :raises NotFoundError: If the user does not exist.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return UserOut.from_model(user)

    def update_profile(self, dto: UpdateProfileIn) -> UserOut:
        """
        Overwrite display name, email and username together.

        :raises BadRequestError: If any field is blank or malformed.
        :raises ConflictError: If the email or username belongs to someone else.
        :raises NotFoundError: If the user no longer exists.
        """
        self.require_text(full_name=dto.full_name, email=dto.email, username=dto.username)
        email, username = dto.email or "", dto.username or ""

        with self.rw_uow() as uow:
            user = uow.users.get(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)
            if uow.users.exists_by_email_or_username(
                email=email, username=username, exclude_id=user.id
            ):
                raise ConflictError("User", DUPLICATE_USER_MESSAGE)
            try:
                uow.users.assign_updates(
                    user,
                    {"full_name": dto.full_name, "email": email, "username": username},
                )
            except ValueError as exc:
                raise BadRequestError(str(exc)) from exc
            except IntegrityError as exc:
                if _is_duplicate_user(exc):
                    raise ConflictError("User", DUPLICATE_USER_MESSAGE) from exc
                raise
            out = UserOut.from_model(user)
        log.info("user.profile_updated", extra={"user_id": dto.user_id})
        return out

    # ------------------------------------------------------------------ #
    # Media
    # ------------------------------------------------------------------ #

    def update_avatar(self, user_id: int, avatar_path: Path | None) -> UserOut:
        """Replace the avatar; see :meth:`_replace_image`."""
        return self._replace_image(user_id, avatar_path, field="avatar", label="avatar")

    def update_cover_image(self, user_id: int, cover_image_path: Path | None) -> UserOut:
        """Replace the cover image; see :meth:`_replace_image`."""
        return self._replace_image(user_id, cover_image_path, field="cover_image", label="cover image")

    def _replace_image(self, user_id: int, path: Path | None, *, field: str, label: str) -> UserOut:
        """
        Delete the old hosted image, upload the new one, store its URL.

        The old asset is deleted first and a failed delete stops the update
        before anything is uploaded. There is no compensation: if the delete
        succeeds and the upload then fails, the old image is gone.

        :raises BadRequestError: If no file was staged or the upload fails.
        :raises InternalServiceError: If the old image cannot be deleted.
        :raises NotFoundError: If the user does not exist.
        """
        if path is None:
            raise BadRequestError(f"{label.capitalize()} file is missing")

        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            old_url: str | None = getattr(user, field)

        if old_url:
            try:
                self.media.delete(old_url)
            except MediaStoreError as exc:
                log.error("media.delete_failed: %s", exc, extra={"user_id": user_id})
                raise InternalServiceError(f"Failed to delete old {label}") from exc

        try:
            new_url = self.media.upload(path)
        except MediaStoreError as exc:
            log.warning("media.upload_failed: %s", exc, extra={"user_id": user_id})
            raise BadRequestError(f"Error while uploading {label}") from exc

        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            uow.users.assign_updates(user, {field: new_url})
            out = UserOut.from_model(user)
        log.info("user.%s_updated", field, extra={"user_id": user_id})
        return out
