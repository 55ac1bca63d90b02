"""
Session middleware: access-token verification and session cookies.

Access tokens are read from the ``Authorization: Bearer`` header or the
``accessToken`` cookie by flask-jwt-extended. Every verification failure is
answered with the same 401 envelope so callers cannot tell which check failed.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Flask, Response, g
from flask_jwt_extended import (
    get_current_user,
    set_access_cookies,
    set_refresh_cookies,
    unset_jwt_cookies,
    unset_refresh_cookies,
    verify_jwt_in_request,
)

from vidtube.core.errors import error_response
from vidtube.core.extensions import jwt
from vidtube.services._shared.errors import NotFoundError
from vidtube.services.accounts.dto import UserOut

log = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

INVALID_ACCESS_MESSAGE = "Invalid or expired access token"


def init_app(app: Flask) -> None:
    """Register the identity loader and the 401 responses on the JWT manager."""

    @jwt.user_lookup_loader
    def _load_identity(jwt_header: dict[str, Any], jwt_data: dict[str, Any]) -> UserOut | None:
        from vidtube.api.deps import account_service

        try:
            user_id = int(jwt_data["sub"])
        except (KeyError, TypeError, ValueError):
            return None
        try:
            return account_service(user_id).get_current_user(user_id)
        except NotFoundError:
            return None

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return error_response(status=401, message="Unauthorized request")

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        log.warning("session.invalid_token: %s", reason)
        return error_response(status=401, message=INVALID_ACCESS_MESSAGE)

    @jwt.expired_token_loader
    def _expired_token(jwt_header: dict[str, Any], jwt_data: dict[str, Any]):
        return error_response(status=401, message=INVALID_ACCESS_MESSAGE)

    @jwt.user_lookup_error_loader
    def _unknown_user(jwt_header: dict[str, Any], jwt_data: dict[str, Any]):
        return error_response(status=401, message=INVALID_ACCESS_MESSAGE)

    @jwt.needs_fresh_token_loader
    def _needs_fresh(jwt_header: dict[str, Any], jwt_data: dict[str, Any]):
        return error_response(status=401, message=INVALID_ACCESS_MESSAGE)


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token and attach the identity."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        g.identity = get_current_user()
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_identity() -> UserOut:
    """Return the identity attached by :func:`require_auth`."""
    return cast(UserOut, g.identity)


def set_identity(user: UserOut) -> None:
    """Replace the request-scoped identity after the caller's row changed."""
    g.identity = user


def set_session_cookies(response: Response, *, access_token: str, refresh_token: str) -> Response:
    """Deliver both tokens as http-only cookies alongside the JSON body."""
    set_access_cookies(response, access_token)
    set_refresh_cookies(response, refresh_token)
    return response


def clear_session_cookies(response: Response) -> Response:
    unset_jwt_cookies(response)
    return response


def clear_refresh_cookie(response: Response) -> Response:
    unset_refresh_cookies(response)
    return response
