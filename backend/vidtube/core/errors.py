"""Centralized JSON error handling producing the API response envelope."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from vidtube.core.logger import ensure_request_id
from vidtube.services._shared.errors import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    InternalServiceError,
    NotFoundError,
    ServiceError,
)

log = logging.getLogger(__name__)


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def error_envelope(
    *,
    status: int,
    message: str,
    code: str | None = None,
    errors: list[Any] | None = None,
) -> dict[str, Any]:
    """
    Build the failure envelope shared by every error response.

    :param status: HTTP status code.
    :param message: Human-readable error summary (safe for clients).
    :param code: Stable machine-consumable error code.
    :param errors: Optional safe, structured details.
    :returns: ``{statusCode, data, message, success, errors, code, request_id}``.
    :rtype: dict
    """
    return {
        "statusCode": int(status),
        "data": None,
        "message": message,
        "success": False,
        "errors": errors or [],
        "code": code or _http_status_to_code(int(status)),
        "request_id": ensure_request_id(),
    }


def error_response(
    *,
    status: int,
    message: str,
    code: str | None = None,
    errors: list[Any] | None = None,
) -> tuple[Response, int]:
    """Return a ``(response, status)`` pair carrying the failure envelope."""
    body = error_envelope(status=status, message=message, code=code, errors=errors)
    return jsonify(body), int(status)


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier, typically snake_case.
    errors : list[Any] | None, optional
        Optional structured payload (e.g., validation messages).
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        errors: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.errors = errors or []

    def to_envelope(self) -> dict[str, Any]:
        """Serialize error metadata into the response envelope."""
        return error_envelope(
            status=self.status_code,
            message=self.message,
            code=self.code,
            errors=self.errors,
        )


# Domain conveniences
class BadRequest(APIError):
    """400 for malformed or missing input."""

    def __init__(self, message: str = "Bad request", errors: list[Any] | None = None) -> None:
        super().__init__(message, status_code=HTTPStatus.BAD_REQUEST, code="bad_request", errors=errors)


class Unauthorized(APIError):
    """401 when authentication fails."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code="unauthorized")


class NotFound(APIError):
    """404 when resources are missing."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Conflict(APIError):
    """409 for uniqueness collisions."""

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT, code="conflict")


class ServerError(APIError):
    """500 for expected-but-failed internal steps."""

    def __init__(self, message: str = "Something went wrong") -> None:
        super().__init__(
            message,
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
        )


def translate_service_error(exc: ServiceError) -> APIError:
    """
    Map framework-agnostic service errors to API (HTTP) errors.

    :param exc: Exception raised within the service layer.
    :returns: API error ready to be rendered.
    """
    if isinstance(exc, AuthenticationError):
        return Unauthorized(str(exc))
    if isinstance(exc, NotFoundError):
        return NotFound(str(exc))
    if isinstance(exc, ConflictError):
        return Conflict(str(exc))
    if isinstance(exc, InternalServiceError):
        return ServerError(str(exc))
    if isinstance(exc, BadRequestError):
        return BadRequest(str(exc))
    # Any other ServiceError subclass → 400 Bad Request
    return BadRequest(str(exc))


def _validation_errors(messages: Any) -> list[dict[str, Any]]:
    """Flatten marshmallow messages into ``[{field, messages}]`` items."""
    if isinstance(messages, dict):
        return [{"field": field, "messages": msgs} for field, msgs in messages.items()]
    return [{"field": None, "messages": messages}]


def _log_api_error(err: APIError) -> None:
    # 4xx → warning; 5xx → error
    level = log.error if err.status_code >= 500 else log.warning
    level(
        "APIError: code=%s status=%s msg=%s path=%s",
        err.code,
        err.status_code,
        err.message,
        request.path,
    )


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Every handled error is rendered with :func:`error_envelope`.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        _log_api_error(err)
        return jsonify(err.to_envelope()), err.status_code

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        api_err = translate_service_error(err)
        _log_api_error(api_err)
        return jsonify(api_err.to_envelope()), api_err.status_code

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        log.warning("ValidationError: path=%s", request.path)
        return error_response(
            status=HTTPStatus.BAD_REQUEST,
            message="Validation failed",
            code="validation_error",
            errors=_validation_errors(err.messages),
        )

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        # Werkzeug may provide HTML-ish description; normalize for clients
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        level = log.error if status >= 500 else log.warning
        level("HTTPException: code=%s status=%s detail=%s", error_code, status, message)
        return error_response(status=status, message=message, code=error_code)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Do not leak raw DB error to clients
        log.error("IntegrityError", exc_info=True)
        return error_response(status=HTTPStatus.CONFLICT, message="Resource conflict")

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        log.error("OperationalError", exc_info=True)
        return error_response(
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            message="Service temporarily unavailable",
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details
        log.error("Unhandled exception", exc_info=True)
        return error_response(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            message="Unexpected error",
        )
