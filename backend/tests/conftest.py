"""Pytest fixtures wiring the app, an isolated database and test doubles.

Every test that touches the database gets freshly created tables on the
in-memory SQLite engine and drops them afterwards, so committed data never
leaks between cases.
"""

from __future__ import annotations

import os

import pytest
from vidtube.core.config import TestingConfig
from vidtube.core.extensions import db as _db  # Flask-SQLAlchemy instance
from vidtube.factory import create_app  # application factory under test
from vidtube.infra.media import MEDIA_EXTENSION_KEY
from vidtube.services._shared.ports import InMemoryMediaStore


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestingConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture()
def db(app):
    """Create all tables inside an app context and drop them after the test.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(db):
    """Return the Flask-scoped session the application code also uses."""
    return db.session


@pytest.fixture()
def media_store(app):
    """Install a fresh in-memory media store for the test."""
    store = InMemoryMediaStore()
    app.extensions[MEDIA_EXTENSION_KEY] = store
    return store


@pytest.fixture()
def client(app, db, media_store):
    """HTTP test client sharing the test's app context and database.

    Cookies are not replayed automatically; tests send the ones they mean to.
    """
    return app.test_client(use_cookies=False)


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk
