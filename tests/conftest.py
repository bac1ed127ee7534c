import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from knitadmin.db import Base, get_db, make_engine
from knitadmin.patterns.sample_data import seed_sample_data
from knitadmin.patterns.sessions import editor_sessions
from knitadmin.server import app


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    """Seeded session for service-level tests."""
    session = session_factory()
    seed_sample_data(session)
    yield session
    session.close()


@pytest.fixture
def client(db, session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clear_editor_sessions():
    yield
    editor_sessions.clear()
