from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from vidtube.services._shared.errors import AuthenticationError


class TokenProvider(Protocol):
    """Port for issuing access tokens and issuing/decoding refresh tokens."""

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def create_refresh_token(
        self,
        *,
        identity: str,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def decode_refresh_token(self, token: str) -> dict[str, Any]:
        """Return verified claims or raise ``AuthenticationError``."""
        ...


class StubTokenProvider(TokenProvider):
    """Deterministic token provider used in unit tests."""

    def __init__(self) -> None:
        self._now = datetime.now(tz=UTC)
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    def _mk(
        self,
        *,
        identity: str,
        ttype: str,
        exp_delta: timedelta,
        additional_claims: dict[str, Any] | None = None,
    ) -> str:
        self._seq += 1
        jti = f"jti-{self._seq}"
        token = f"{ttype}.{identity}.{jti}"
        payload: dict[str, Any] = {
            "sub": identity,
            "type": ttype,
            "jti": jti,
            "exp": int((self._now + exp_delta).timestamp()),
        }
        if additional_claims:
            payload.update(additional_claims)
        self._issued[token] = payload
        return token

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._mk(
            identity=identity,
            ttype="access",
            exp_delta=expires_delta or timedelta(minutes=15),
            additional_claims=additional_claims,
        )

    def create_refresh_token(
        self,
        *,
        identity: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._mk(
            identity=identity,
            ttype="refresh",
            exp_delta=expires_delta or timedelta(days=10),
        )

    def decode_refresh_token(self, token: str) -> dict[str, Any]:
        payload = self._issued.get(token)
        if payload is None or payload["type"] != "refresh":
            raise AuthenticationError("Invalid or expired refresh token")
        return payload

    def claims_of(self, token: str) -> dict[str, Any]:
        """Return the claims recorded for any issued token (test helper)."""
        return self._issued[token]
