"""Tests for TokenService issuance and refresh-token rotation."""

from __future__ import annotations

from datetime import timedelta

import pytest
from tests.factories.user import UserFactory
from vidtube.core.config import TokenSettings
from vidtube.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from vidtube.services._shared.errors import AuthenticationError, NotFoundError
from vidtube.services._shared.ports import StubTokenProvider
from vidtube.services.auth.dto import RefreshIn
from vidtube.services.auth.service import TokenService

SETTINGS = TokenSettings(
    access_secret="access-secret",
    access_expires=timedelta(minutes=15),
    refresh_secret="refresh-secret",
    refresh_expires=timedelta(days=10),
)


@pytest.fixture()
def provider() -> StubTokenProvider:
    return StubTokenProvider()


@pytest.fixture()
def service(db, provider) -> TokenService:
    return TokenService(token_provider=provider, settings=SETTINGS)


def _stored_token(session, user):
    session.refresh(user)
    return user.refresh_token


class TestIssue:
    def test_access_token_carries_identity_claims(self, service, provider):
        user = UserFactory(email="claims@example.com", username="claims", full_name="Claire")
        token = service.issue_access_token(user)
        claims = provider.claims_of(token)
        assert claims["sub"] == str(user.id)
        assert claims["type"] == "access"
        assert claims["email"] == "claims@example.com"
        assert claims["username"] == "claims"
        assert claims["fullName"] == "Claire"

    def test_refresh_token_carries_only_the_id(self, service, provider):
        token = service.issue_refresh_token(7)
        claims = provider.claims_of(token)
        assert claims["sub"] == "7"
        assert "email" not in claims

    def test_pair_is_stored_and_replaces_previous(self, service, session):
        user = UserFactory(refresh_token="stale")
        pair = service.issue_token_pair(user.id)
        assert pair.access_token != pair.refresh_token
        assert _stored_token(session, user) == pair.refresh_token

        second = service.issue_token_pair(user.id)
        assert _stored_token(session, user) == second.refresh_token

    def test_pair_for_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            service.issue_token_pair(4242)


class TestRefresh:
    def test_rotation_returns_new_pair_and_stores_it(self, service, session):
        user = UserFactory()
        first = service.issue_token_pair(user.id)

        rotated = service.refresh(RefreshIn(refresh_token=first.refresh_token))

        assert rotated.refresh_token != first.refresh_token
        assert _stored_token(session, user) == rotated.refresh_token

    def test_rotated_out_token_is_rejected(self, service):
        user = UserFactory()
        first = service.issue_token_pair(user.id)
        service.refresh(RefreshIn(refresh_token=first.refresh_token))

        with pytest.raises(AuthenticationError) as exc:
            service.refresh(RefreshIn(refresh_token=first.refresh_token))
        assert str(exc.value) == "Invalid or expired refresh token"

    def test_token_from_earlier_login_is_rejected(self, service):
        user = UserFactory()
        old = service.issue_token_pair(user.id)
        service.issue_token_pair(user.id)
        with pytest.raises(AuthenticationError):
            service.refresh(RefreshIn(refresh_token=old.refresh_token))

    @pytest.mark.parametrize("token", [None, "", "   "])
    def test_missing_token(self, service, token):
        with pytest.raises(AuthenticationError) as exc:
            service.refresh(RefreshIn(refresh_token=token))
        assert str(exc.value) == "Unauthorized request"

    def test_unverifiable_token(self, service):
        with pytest.raises(AuthenticationError):
            service.refresh(RefreshIn(refresh_token="garbage"))

    def test_access_token_cannot_refresh(self, service):
        user = UserFactory()
        pair = service.issue_token_pair(user.id)
        with pytest.raises(AuthenticationError):
            service.refresh(RefreshIn(refresh_token=pair.access_token))

    def test_logged_out_user_cannot_refresh(self, service, provider):
        user = UserFactory(refresh_token=None)
        token = provider.create_refresh_token(identity=str(user.id))
        with pytest.raises(AuthenticationError):
            service.refresh(RefreshIn(refresh_token=token))

    def test_deleted_user(self, service, provider):
        token = provider.create_refresh_token(identity="999")
        with pytest.raises(NotFoundError):
            service.refresh(RefreshIn(refresh_token=token))

    def test_non_numeric_subject(self, service, provider):
        token = provider.create_refresh_token(identity="not-a-number")
        with pytest.raises(AuthenticationError):
            service.refresh(RefreshIn(refresh_token=token))


class TestWithJWTProvider:
    """Same flow with real signed tokens."""

    @pytest.fixture()
    def jwt_service(self, app, db) -> TokenService:
        settings = TokenSettings.from_mapping(app.config)
        return TokenService(token_provider=JWTTokenProvider(settings), settings=settings)

    def test_login_refresh_reuse(self, jwt_service):
        user = UserFactory()
        first = jwt_service.issue_token_pair(user.id)
        second = jwt_service.refresh(RefreshIn(refresh_token=first.refresh_token))
        assert second.refresh_token != first.refresh_token
        with pytest.raises(AuthenticationError):
            jwt_service.refresh(RefreshIn(refresh_token=first.refresh_token))
        third = jwt_service.refresh(RefreshIn(refresh_token=second.refresh_token))
        assert third.refresh_token not in {first.refresh_token, second.refresh_token}
