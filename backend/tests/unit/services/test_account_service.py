"""Tests for AccountService registration, credentials and media updates."""

from __future__ import annotations

from datetime import timedelta

import pytest
from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.utils import staged_file
from vidtube.core.config import TokenSettings
from vidtube.models.user import User
from vidtube.services._shared.errors import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    InternalServiceError,
    NotFoundError,
)
from vidtube.services._shared.ports import InMemoryMediaStore, StubTokenProvider
from vidtube.services.accounts.dto import (
    ChangePasswordIn,
    LoginIn,
    RegisterIn,
    UpdateProfileIn,
)
from vidtube.services.accounts.service import AccountService
from vidtube.services.auth.service import TokenService

SETTINGS = TokenSettings(
    access_secret="a",
    access_expires=timedelta(minutes=15),
    refresh_secret="r",
    refresh_expires=timedelta(days=10),
)


@pytest.fixture()
def store() -> InMemoryMediaStore:
    return InMemoryMediaStore()


@pytest.fixture()
def service(db, store) -> AccountService:
    tokens = TokenService(token_provider=StubTokenProvider(), settings=SETTINGS)
    return AccountService(tokens=tokens, media=store)


def _register_in(tmp_path, **overrides) -> RegisterIn:
    fields = {
        "full_name": "Alice Example",
        "email": "a@x.com",
        "username": "alice",
        "password": "p",
        "avatar_path": staged_file(tmp_path, "avatar.png"),
        "cover_image_path": None,
    }
    fields.update(overrides)
    return RegisterIn(**fields)


class TestRegister:
    def test_creates_user_with_hosted_avatar(self, service, store, session, tmp_path):
        out = service.register(
            _register_in(tmp_path, cover_image_path=staged_file(tmp_path, "cover.png"))
        )

        assert out.username == "alice"
        assert out.email == "a@x.com"
        assert out.avatar in store.assets
        assert out.cover_image in store.assets
        stored = session.get(User, out.id)
        assert stored.verify_password("p")
        assert stored.refresh_token is None

    def test_result_has_no_secrets(self, service, tmp_path):
        out = service.register(_register_in(tmp_path))
        assert not hasattr(out, "password_hash")
        assert not hasattr(out, "refresh_token")

    def test_identifiers_are_folded(self, service, tmp_path):
        out = service.register(_register_in(tmp_path, email=" A@X.COM ", username="ALICE"))
        assert (out.email, out.username) == ("a@x.com", "alice")

    @pytest.mark.parametrize("field", ["full_name", "email", "username", "password"])
    def test_blank_fields_rejected_before_upload(self, service, store, tmp_path, field):
        with pytest.raises(BadRequestError):
            service.register(_register_in(tmp_path, **{field: "  "}))
        assert store.assets == {}

    def test_malformed_email_rejected_before_upload(self, service, store, session, tmp_path):
        with pytest.raises(BadRequestError, match="Email format looks invalid"):
            service.register(
                _register_in(
                    tmp_path,
                    email="not-an-email",
                    cover_image_path=staged_file(tmp_path, "cover.png"),
                )
            )
        assert store.assets == {}
        assert session.query(User).count() == 0

    def test_avatar_required(self, service, tmp_path):
        with pytest.raises(BadRequestError, match="Avatar file is required"):
            service.register(_register_in(tmp_path, avatar_path=None))

    def test_duplicate_detected_before_upload(self, service, store, tmp_path):
        UserFactory(email="other@x.com", username="alice")
        with pytest.raises(ConflictError, match="already exists"):
            service.register(_register_in(tmp_path, username="Alice"))
        assert store.assets == {}

    def test_avatar_upload_failure(self, service, store, session, tmp_path):
        store.fail_uploads = {"avatar.png"}
        with pytest.raises(BadRequestError, match="Failed to upload avatar"):
            service.register(_register_in(tmp_path))
        assert session.query(User).count() == 0

    def test_cover_upload_failure_is_skipped(self, service, store, tmp_path):
        store.fail_uploads = {"cover.png"}
        out = service.register(
            _register_in(tmp_path, cover_image_path=staged_file(tmp_path, "cover.png"))
        )
        assert out.cover_image is None
        assert out.avatar in store.assets


class TestLogin:
    def test_login_by_username_or_email(self, service, session):
        user = UserFactory(email="bob@x.com", username="bob")
        by_name = service.login(LoginIn(password=DEFAULT_PASSWORD, username="BOB"))
        by_mail = service.login(LoginIn(password=DEFAULT_PASSWORD, email="bob@x.com"))

        assert by_name.user.id == by_mail.user.id == user.id
        session.refresh(user)
        assert user.refresh_token == by_mail.refresh_token

    def test_identifier_required(self, service):
        with pytest.raises(BadRequestError, match="Username or email is required"):
            service.login(LoginIn(password="x"))

    def test_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            service.login(LoginIn(password="x", username="nobody"))

    def test_wrong_password(self, service, session):
        user = UserFactory()
        with pytest.raises(AuthenticationError, match="Invalid user credentials"):
            service.login(LoginIn(password="wrong", username=user.username))
        session.refresh(user)
        assert user.refresh_token is None


class TestSessionLifecycle:
    def test_logout_clears_token_and_is_idempotent(self, service, session):
        user = UserFactory()
        login = service.login(LoginIn(password=DEFAULT_PASSWORD, username=user.username))
        service.logout(user.id)
        service.logout(user.id)
        session.refresh(user)
        assert user.refresh_token is None
        with pytest.raises(AuthenticationError):
            service.refresh_session(login.refresh_token)

    def test_refresh_session_rotates(self, service):
        user = UserFactory()
        login = service.login(LoginIn(password=DEFAULT_PASSWORD, username=user.username))
        pair = service.refresh_session(login.refresh_token)
        assert pair.refresh_token != login.refresh_token


class TestChangePassword:
    def test_replaces_password_and_revokes_session(self, service, session):
        user = UserFactory()
        service.login(LoginIn(password=DEFAULT_PASSWORD, username=user.username))

        service.change_password(
            ChangePasswordIn(user_id=user.id, old_password=DEFAULT_PASSWORD, new_password="n3w")
        )

        session.refresh(user)
        assert user.verify_password("n3w")
        assert user.refresh_token is None

    def test_wrong_old_password(self, service, session):
        user = UserFactory()
        with pytest.raises(AuthenticationError, match="Invalid old password"):
            service.change_password(
                ChangePasswordIn(user_id=user.id, old_password="nope", new_password="n3w")
            )
        session.refresh(user)
        assert user.verify_password(DEFAULT_PASSWORD)

    def test_blank_new_password(self, service):
        user = UserFactory()
        with pytest.raises(BadRequestError):
            service.change_password(
                ChangePasswordIn(user_id=user.id, old_password=DEFAULT_PASSWORD, new_password=" ")
            )

    def test_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            service.change_password(ChangePasswordIn(user_id=99, old_password="a", new_password="b"))


class TestProfile:
    def test_get_current_user(self, service):
        user = UserFactory()
        assert service.get_current_user(user.id).username == user.username
        with pytest.raises(NotFoundError):
            service.get_current_user(12345)

    def test_update_profile(self, service):
        user = UserFactory()
        out = service.update_profile(
            UpdateProfileIn(user_id=user.id, full_name="New Name", email="NEW@x.com", username="new")
        )
        assert (out.full_name, out.email, out.username) == ("New Name", "new@x.com", "new")

    def test_update_profile_keeping_own_identifiers(self, service):
        user = UserFactory(email="same@x.com", username="same")
        out = service.update_profile(
            UpdateProfileIn(user_id=user.id, full_name="Renamed", email="same@x.com", username="same")
        )
        assert out.full_name == "Renamed"

    def test_update_profile_conflict(self, service):
        UserFactory(email="taken@x.com")
        user = UserFactory()
        with pytest.raises(ConflictError):
            service.update_profile(
                UpdateProfileIn(
                    user_id=user.id, full_name="X", email="taken@x.com", username=user.username
                )
            )

    def test_update_profile_requires_all_fields(self, service):
        user = UserFactory()
        with pytest.raises(BadRequestError, match="email"):
            service.update_profile(
                UpdateProfileIn(user_id=user.id, full_name="X", email="", username="y")
            )

    def test_update_profile_malformed_email(self, service):
        user = UserFactory()
        with pytest.raises(BadRequestError):
            service.update_profile(
                UpdateProfileIn(user_id=user.id, full_name="X", email="nope", username="y")
            )


class TestImages:
    def test_avatar_replaced_and_old_deleted(self, service, store, tmp_path):
        user = UserFactory()
        old = user.avatar
        out = service.update_avatar(user.id, staged_file(tmp_path, "new.png"))
        assert store.deleted == [old]
        assert out.avatar in store.assets
        assert out.avatar != old

    def test_cover_set_without_previous(self, service, store, tmp_path):
        user = UserFactory(cover_image=None)
        out = service.update_cover_image(user.id, staged_file(tmp_path, "cover.png"))
        assert store.deleted == []
        assert out.cover_image in store.assets

    def test_missing_file(self, service):
        user = UserFactory()
        with pytest.raises(BadRequestError, match="Avatar file is missing"):
            service.update_avatar(user.id, None)
        with pytest.raises(BadRequestError, match="Cover image file is missing"):
            service.update_cover_image(user.id, None)

    def test_failed_delete_stops_before_upload(self, service, store, session, tmp_path):
        user = UserFactory()
        old = user.avatar
        store.fail_deletes = True
        with pytest.raises(InternalServiceError, match="Failed to delete old avatar"):
            service.update_avatar(user.id, staged_file(tmp_path, "new.png"))
        assert store.assets == {}
        session.refresh(user)
        assert user.avatar == old

    def test_failed_upload_after_delete(self, service, store, session, tmp_path):
        user = UserFactory()
        old = user.avatar
        store.fail_uploads = {"*"}
        with pytest.raises(BadRequestError, match="Error while uploading avatar"):
            service.update_avatar(user.id, staged_file(tmp_path, "new.png"))
        assert store.deleted == [old]
        session.refresh(user)
        assert user.avatar == old

    def test_unknown_user(self, service, tmp_path):
        with pytest.raises(NotFoundError):
            service.update_avatar(404, staged_file(tmp_path))
