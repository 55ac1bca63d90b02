# vidtube/services/auth/service.py
from __future__ import annotations

import hmac
import logging
from typing import Any

from vidtube.core.config import TokenSettings
from vidtube.models.user import User
from vidtube.services._shared.base import BaseService, ServiceContext
from vidtube.services._shared.errors import AuthenticationError, NotFoundError
from vidtube.services._shared.ports.token_provider import TokenProvider
from vidtube.services.auth.dto import RefreshIn, TokenPairOut
from vidtube.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)

INVALID_REFRESH_MESSAGE = "Invalid or expired refresh token"


class TokenService(BaseService):
    """
    Session token lifecycle: issue, persist and rotate.

    The user row holds exactly one accepted refresh token. Issuing a pair
    overwrites it, so any earlier refresh token stops working the moment a new
    one is stored. Rotation on refresh is a compare-and-swap against the
    presented token; of two concurrent refreshes with the same token only one
    succeeds.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        settings: TokenSettings,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for issuing/decoding JWTs.
        :param settings: Expiry configuration for both token kinds.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_provider
        self.settings = settings

    # ------------------------------------------------------------------ #
    # Issuing
    # ------------------------------------------------------------------ #

    def issue_access_token(self, user: User) -> str:
        """
        Sign a short-lived access token carrying the public identity claims.

        :param user: Loaded user row.
        :returns: Encoded access JWT.
        """
        claims: dict[str, Any] = {
            "email": user.email,
            "username": user.username,
            "fullName": user.full_name,
        }
        return self.tokens.create_access_token(
            identity=str(user.id),
            additional_claims=claims,
            expires_delta=self.settings.access_expires,
        )

    def issue_refresh_token(self, user_id: int) -> str:
        """Sign a long-lived refresh token carrying only the user id."""
        return self.tokens.create_refresh_token(
            identity=str(user_id),
            expires_delta=self.settings.refresh_expires,
        )

    def issue_token_pair(self, user_id: int) -> TokenPairOut:
        """
        Issue a fresh pair and make its refresh half the only accepted one.

        :param user_id: Target user id.
        :returns: Access/Refresh token pair.
        :raises NotFoundError: If the user does not exist.
        """
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            pair = self._issue_and_store(uow, user, rotate_from=None)
        log.info("session.issued", extra={"user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Verify a refresh token and rotate it into a new pair.

        :param dto: Refresh input.
        :returns: New Access/Refresh token pair.
        :raises AuthenticationError: If the token is absent, fails
            verification, or is not the one currently stored.
        :raises NotFoundError: If the embedded user no longer exists.
        """
        token = (dto.refresh_token or "").strip()
        if not token:
            raise AuthenticationError("Unauthorized request")

        claims = self.tokens.decode_refresh_token(token)
        try:
            user_id = int(claims["sub"])
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError(INVALID_REFRESH_MESSAGE) from None

        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            stored = user.refresh_token or ""
            if not stored or not hmac.compare_digest(stored.encode(), token.encode()):
                log.warning("session.refresh_rejected", extra={"user_id": user_id})
                raise AuthenticationError(INVALID_REFRESH_MESSAGE)
            pair = self._issue_and_store(uow, user, rotate_from=token)
        log.info("session.rotated", extra={"user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue_and_store(
        self, uow: SQLAlchemyUnitOfWork, user: User, *, rotate_from: str | None
    ) -> TokenPairOut:
        access = self.issue_access_token(user)
        refresh = self.issue_refresh_token(user.id)
        stored = uow.users.swap_refresh_token(
            user.id,
            refresh,
            expected=rotate_from,
            unconditional=rotate_from is None,
        )
        if not stored:
            # Another request rotated the same token first.
            raise AuthenticationError(INVALID_REFRESH_MESSAGE)
        return TokenPairOut(access_token=access, refresh_token=refresh)
