import os

# Must be set before the board package reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from board import database, services
from board.api import app
from board.database import Base
from board.models import MemberRole


@pytest.fixture
def session_local(monkeypatch):
    """Provide an isolated in-memory database for each test."""
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(database, "SessionLocal", TestingSessionLocal)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def client(session_local):
    return TestClient(app)


@pytest.fixture
def register(client):
    def _register(username, password="1234", name="Son"):
        return client.post(
            "/api/members",
            json={"username": username, "password": password, "name": name},
        )

    return _register


@pytest.fixture
def login(client):
    def _login(username, password="1234"):
        resp = client.post("/api/auth/login", json={"username": username, "password": password})
        assert resp.status_code == 200, resp.text
        return resp.json()["data"]["access_token"]

    return _login


@pytest.fixture
def user_token(register, login):
    assert register("user1").status_code == 201
    return login("user1")


@pytest.fixture
def admin_token(register, login):
    assert register("admin1", name="Admin").status_code == 201
    services.change_member_role("admin1", MemberRole.ROLE_ADMIN)
    return login("admin1")


