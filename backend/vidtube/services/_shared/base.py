# vidtube/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass

from vidtube.services._shared.errors import BadRequestError
from vidtube.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (auth, request ids).

    :param actor_id: Authenticated user identifier.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: int | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Offer shared validation helpers for required input.
    * Keep services thin, orchestration-only, no web leakage.

    Notes
    -----
    - Services never touch the global session; always use a Unit of Work.
    - Errors raised here are framework-agnostic; the API layer translates them.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (auth, tracing).
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork()

    # ----------------------- Validation utilities ---------------------------

    @staticmethod
    def require_text(**fields: str | None) -> None:
        """
        Ensure every given field is a non-blank string.

        :raises BadRequestError: Naming the first blank field(s).
        """
        missing = [name for name, value in fields.items() if not (value or "").strip()]
        if missing:
            raise BadRequestError(f"Required fields are missing: {', '.join(missing)}")
