"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from contextlib import suppress

from sqlalchemy import event
from sqlalchemy.orm import Session

from vidtube.core.extensions import db
from vidtube.repositories import RelationshipRepository, UserRepository
from vidtube.uow.base import UnitOfWork


def _block_writes(session, flush_context, instances) -> None:
    if session.new or session.dirty or session.deleted:
        raise RuntimeError(
            "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
        )


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.relationships = RelationshipRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    The same session is shared across all repositories for a consistent transaction.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Blocks ORM flushes that would write anything.
    - Rolls back on exit when it started the transaction itself, so loaded
      state never outlives the scope.
    - Disallows ``commit()``.

    When a transaction is already running on the session the scope attaches
    to it and leaves it open on exit.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)
        self._owns_transaction = False
        self._guarded: Session | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # Resolve the concrete Session: the scoped proxy neither exposes
        # in_transaction() nor accepts per-instance event listeners.
        self._guarded = self.session()
        self._owns_transaction = not self._guarded.in_transaction()
        event.listen(self._guarded, "before_flush", _block_writes)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owns_transaction:
                self.session.rollback()
        finally:
            if self._guarded is not None:
                with suppress(Exception):
                    event.remove(self._guarded, "before_flush", _block_writes)
                self._guarded = None
            self._owns_transaction = False

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
