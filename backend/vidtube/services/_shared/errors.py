"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or
HTTP. They are the contract between repositories, adapters and application
services. Translation to the JSON response envelope happens in
``vidtube/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint (e.g. ``'uq_users_email'``).

    Returns
    -------
    bool
        True if the driver message mentions the constraint. SQLite reports
        column names instead, so ``users.email`` style names also match.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    # uq_users_email -> users.email (sqlite wording)
    parts = constraint_name.lower().split("_", 2)
    return len(parts) == 3 and f"{parts[1]}.{parts[2]}" in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, adapters or domain logic.
    """


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class BadRequestError(ServiceError):
    """Raised for missing or malformed input (empty fields, missing files)."""


class AuthenticationError(ServiceError):
    """
    Raised when credentials or tokens are rejected.

    Messages stay deliberately vague so callers cannot tell which part of a
    credential was wrong.
    """

    def __init__(self, message: str = "Unauthorized request") -> None:
        super().__init__(message)


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return self.detail


class InternalServiceError(ServiceError):
    """Raised when a required internal step (e.g. a media upload) fails."""

    def __init__(self, message: str = "Something went wrong") -> None:
        super().__init__(message)
