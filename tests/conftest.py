"""
Pytest fixtures for testing
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from clientdesk.application.mutations import MutationCoordinator
from clientdesk.application.notifications import CollectingNotifier
from clientdesk.application.queries import ClientQueries
from clientdesk.application.query_cache import QueryCache
from clientdesk.infrastructure.db import models  # noqa: F401  (registers tables)
from clientdesk.infrastructure.db.session import Base
from clientdesk.infrastructure.store.blobs import LocalBlobStorage
from clientdesk.infrastructure.store.sql_store import SqlRemoteStore

DOCUMENTS = "client-assets"
VOICE_NOTES = "voice-notes"
FIXED_MS = 1760000000000


@pytest.fixture
def db_engine(tmp_path):
    """File-backed SQLite engine: store calls run in worker threads, each with its own connection"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'clientdesk.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory) -> Session:
    """Create database session for tests"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def blobs(tmp_path):
    return LocalBlobStorage(tmp_path / "storage", "http://files.test", [DOCUMENTS, VOICE_NOTES])


@pytest.fixture
def store(session_factory, blobs):
    return SqlRemoteStore(session_factory, blobs)


@pytest.fixture
def cache():
    return QueryCache()


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def coordinator(store, cache, notifier):
    return MutationCoordinator(store, cache, notifier, clock=lambda: FIXED_MS)


@pytest.fixture
def queries(store, cache):
    return ClientQueries(store, cache, timezone="UTC")
