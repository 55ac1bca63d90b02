# vidtube/infra/jwt/flask_jwt_token_provider.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast
from uuid import uuid4

import jwt as pyjwt

from vidtube.core.config import TokenSettings
from vidtube.services._shared.errors import AuthenticationError
from vidtube.services._shared.ports import TokenProvider

REFRESH_TOKEN_TYPE = "refresh"
INVALID_REFRESH_MESSAGE = "Invalid or expired refresh token"


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Token adapter backed by Flask-JWT-Extended and PyJWT.

    Access tokens go through ``flask_jwt_extended`` so the session middleware
    verifies them with the same settings (``JWT_SECRET_KEY``). Refresh tokens
    are signed with PyJWT using the separate refresh secret, which
    flask-jwt-extended cannot hold alongside the access one.

    .. note::
       Access-token creation requires an active Flask app context.
    """

    settings: TokenSettings

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        from flask_jwt_extended import create_access_token as _create_access

        return cast(
            str,
            _create_access(
                identity=identity,
                additional_claims=additional_claims or {},
                expires_delta=expires_delta or self.settings.access_expires,
            ),
        )

    def create_refresh_token(
        self,
        *,
        identity: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        now = datetime.now(tz=UTC)
        payload = {
            "sub": identity,
            "type": REFRESH_TOKEN_TYPE,
            "iat": now,
            "exp": now + (expires_delta or self.settings.refresh_expires),
            # Two tokens minted within the same second must still differ.
            "jti": uuid4().hex,
        }
        return pyjwt.encode(
            payload, self.settings.refresh_secret, algorithm=self.settings.algorithm
        )

    def decode_refresh_token(self, token: str) -> dict[str, Any]:
        """
        Verify signature, expiry and token type.

        :raises AuthenticationError: With the same vague message for every
            failure, whichever check rejected the token.
        """
        try:
            claims = pyjwt.decode(
                token,
                self.settings.refresh_secret,
                algorithms=[self.settings.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except pyjwt.PyJWTError as exc:
            raise AuthenticationError(INVALID_REFRESH_MESSAGE) from exc
        if claims.get("type") != REFRESH_TOKEN_TYPE:
            raise AuthenticationError(INVALID_REFRESH_MESSAGE)
        return cast(dict[str, Any], claims)
