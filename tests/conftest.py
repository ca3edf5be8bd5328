"""Shared fixtures: in-memory database, API client and unlock headers."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import journal.models  # noqa: F401
from journal.database import get_session
from journal.main import app
from journal.services.auth import create_unlock_token


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    """TestClient without lifespan: no price streams, no file database."""
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unlock_headers():
    token, _ = create_unlock_token()
    return {"Authorization": f"Bearer {token}"}
