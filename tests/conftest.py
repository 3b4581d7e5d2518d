"""Root conftest for all tests.

Provides an isolated in-memory SQLite database per test and a factory
for club activity payloads.
"""

from contextlib import contextmanager

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import Base
from app.db.session import enable_sqlite_savepoints
from app.integrations.strava.schemas import StravaClubActivity


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared by every session in the test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Drop-in replacement for app.db.session.get_session.

    Records every session it opens (factory.opened) and how many were
    closed (factory.closed) so tests can assert on connection handling.
    """
    session_local = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)

    @contextmanager
    def factory():
        session = session_local()
        factory.opened.append(session)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
            factory.closed += 1

    factory.opened = []
    factory.closed = 0
    return factory


@pytest.fixture
def db_session(db_engine):
    """Session for reading back what the code under test wrote."""
    session = sessionmaker(bind=db_engine)()
    try:
        yield session
    finally:
        session.close()


def _raw_activity(**overrides) -> dict:
    raw = {
        "resource_state": 2,
        "athlete": {"resource_state": 2, "firstname": "Ada", "lastname": "L."},
        "name": "Morning Ride",
        "distance": 5000.0,
        "moving_time": 900,
        "elapsed_time": 1000,
        "total_elevation_gain": 42.0,
        "type": "Ride",
        "sport_type": "Ride",
        "workout_type": None,
    }
    raw.update(overrides)
    return raw


@pytest.fixture
def raw_activity():
    """Factory for club activity JSON as returned by Strava."""
    return _raw_activity


@pytest.fixture
def make_activity():
    """Factory for parsed club activities."""

    def _make(**overrides) -> StravaClubActivity:
        raw = _raw_activity(**overrides)
        return StravaClubActivity(**raw, raw=raw)

    return _make
