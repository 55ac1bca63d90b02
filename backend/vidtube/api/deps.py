"""Shared API helpers: response envelope, timing and service wiring."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request

from vidtube.core.config import MediaSettings, TokenSettings
from vidtube.core.logger import ensure_request_id
from vidtube.factory import SETTINGS_KEY
from vidtube.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from vidtube.infra.media import MEDIA_EXTENSION_KEY
from vidtube.services._shared.base import ServiceContext
from vidtube.services._shared.ports import MediaStore
from vidtube.services.accounts.service import AccountService
from vidtube.services.auth.service import TokenService
from vidtube.services.channels.service import ChannelService

F = TypeVar("F", bound=Callable[..., Any])


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def api_response(data: Any, message: str = "Success", *, status: int = 200) -> Response:
    """Wrap ``data`` in the success envelope ``{statusCode, data, message, success}``."""

    return json_response(
        {"statusCode": status, "data": data, "message": message, "success": status < 400},
        status=status,
    )


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# ------------------------------- Wiring ------------------------------------


def token_settings() -> TokenSettings:
    return cast(TokenSettings, current_app.extensions[SETTINGS_KEY]["tokens"])


def media_settings() -> MediaSettings:
    return cast(MediaSettings, current_app.extensions[SETTINGS_KEY]["media"])


def media_store() -> MediaStore:
    return cast(MediaStore, current_app.extensions[MEDIA_EXTENSION_KEY])


def service_context(actor_id: int | None = None) -> ServiceContext:
    return ServiceContext(actor_id=actor_id, request_id=ensure_request_id())


def token_service(actor_id: int | None = None) -> TokenService:
    settings = token_settings()
    return TokenService(
        token_provider=JWTTokenProvider(settings),
        settings=settings,
        ctx=service_context(actor_id),
    )


def account_service(actor_id: int | None = None) -> AccountService:
    return AccountService(
        tokens=token_service(actor_id),
        media=media_store(),
        ctx=service_context(actor_id),
    )


def channel_service(actor_id: int | None = None) -> ChannelService:
    return ChannelService(ctx=service_context(actor_id))
