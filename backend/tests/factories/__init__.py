"""Factory Boy helpers wired to the project's SQLAlchemy session."""

from __future__ import annotations

import factory
from vidtube.core.extensions import db


def _session():
    """Return the Flask-scoped session of the active app context."""
    return db.session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Base class committing every built object.

    Services read through their own units of work, which roll back anything
    that was merely flushed, so factories commit.
    """

    class Meta:
        abstract = True
        sqlalchemy_session_factory = _session
        sqlalchemy_session_persistence = "commit"
