# tests/conftest.py
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"  # Must be set before impostor.core.config is imported

import pytest
import logging
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from impostor.main import app
from impostor.db.base import Base
from impostor.api.deps import get_db
from impostor.core import clock
from impostor.crud import crud_room
from impostor.services import room_service

SQLALCHEMY_DATABASE_URL_TEST = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL_TEST,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(autouse=True)
def setup_test_db():
    """
    Fresh schema for every test. Services commit and roll back on their own,
    so an outer rollback-only transaction would not isolate them.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

def override_get_db():
    """Dependency override for test database sessions."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

@pytest.fixture(scope="function")
def db_session():
    session = TestingSessionLocal()
    yield session
    session.close()

@pytest.fixture(scope="function")
def other_session():
    """A second session on the same database, standing in for a concurrent request."""
    session = TestingSessionLocal()
    yield session
    session.close()

@pytest.fixture(scope="module")
def client() -> TestClient:
    """Provides a TestClient for making API requests. Lifespan (background sweeps) is not started."""
    return TestClient(app)

@pytest.fixture
def make_room(db_session):
    """
    Factory: a waiting room with `player_count` players. The host has session id "s0",
    the others "s1", "s2", ... in join order.
    """
    def _make(player_count: int = 3):
        created = room_service.create_room(db_session, host_name="Host", session_id="s0")
        for i in range(1, player_count):
            room_service.join_room(db_session, created.code, f"Player {i}", f"s{i}")
        return crud_room.get_room(db_session, created.room_id)
    return _make

@pytest.fixture
def frozen_clock(mocker):
    """Pins impostor.core.clock.now_ms to a mutable value; tests move time with frozen_clock["now"] += ms."""
    current = {"now": clock.now_ms()}
    mocker.patch("impostor.core.clock.now_ms", side_effect=lambda: current["now"])
    return current

def pytest_configure(config):
    """
    Hook to configure logging levels before tests are run.
    This silences noisy third-party libraries.
    """
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
