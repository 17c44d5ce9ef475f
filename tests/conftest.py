import pytest
from fastapi.testclient import TestClient

from portfolio_api.db.session import get_db, init_db, make_engine, make_session_factory
from portfolio_api.db.storage import DatabaseStorage


@pytest.fixture()
def engine():
    """Create an in-memory database with all tables."""
    engine = make_engine("sqlite://")
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def db_session(engine):
    """Open a session on the in-memory database."""
    SessionLocal = make_session_factory(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def storage(db_session):
    return DatabaseStorage(db_session)


@pytest.fixture()
def client(engine):
    """API client whose requests run against the in-memory database."""
    from portfolio_api.api import server

    SessionLocal = make_session_factory(engine)

    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    server.app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(server.app)
    finally:
        server.app.dependency_overrides.clear()
