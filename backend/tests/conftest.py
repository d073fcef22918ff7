import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

from madness.database import create_db_engine, get_session, init_db
from madness.main import app

# ============================================================================
# Test database: one shared in-memory SQLite connection
# ============================================================================
# StaticPool keeps every Session on the same connection, so rows written by
# a test's `session` fixture are visible to requests made through `client`.
# The schema is rebuilt for every test.
test_engine = create_db_engine("sqlite:///:memory:", poolclass=StaticPool)


def override_get_session():
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session")
def session_fixture():
    """Fresh schema per test; dropped again on teardown."""
    init_db(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """TestClient whose get_session dependency points at test_engine.

    The override is installed before the client starts so no request
    ever reaches the app's own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
