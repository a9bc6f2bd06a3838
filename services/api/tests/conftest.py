import os

# Must be set before the app (and its limiter) is imported
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import fakeredis
import fakeredis.aioredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db import Base, get_db
from app.infra import redis_client
from app.limiter import limiter
from app.routers.dev import seed_defaults

# --- Test Database Setup ---

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,  # one shared in-memory connection
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "Password123"


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def mock_redis():
    server = fakeredis.FakeServer()
    redis_client._redis_async = fakeredis.aioredis.FakeRedis(server=server, decode_responses=True)
    yield
    redis_client._redis_async = None


@pytest.fixture(autouse=True)
def _no_rate_limit():
    limiter.enabled = False
    yield


@pytest.fixture
def client():
    """Test client with DB override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Direct database session for setup."""
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def seeded(db_session):
    """Default categories and sample stores."""
    return seed_defaults(db_session)


# --- Users ---

def register_and_login(client, email, name="Test User", password=PASSWORD) -> dict:
    """Register + login; returns {"id", "email", "token", "headers"}.

    The session cookie is dropped so each request authenticates by its
    bearer header only.
    """
    resp = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
    assert resp.status_code == 201, resp.text
    login = client.post("/api/auth/login", json={"email": email, "password": password})
    assert login.status_code == 200, login.text
    client.cookies.clear()
    token = login.json()["data"]["token"]
    return {
        "id": resp.json()["data"]["id"],
        "email": email,
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest.fixture
def register(client):
    def _register(email, name="Test User", password=PASSWORD):
        return register_and_login(client, email, name=name, password=password)
    return _register


@pytest.fixture
def user(client):
    return register_and_login(client, "owner@example.com", name="Olive Owner")


@pytest.fixture
def other_user(client):
    return register_and_login(client, "friend@example.com", name="Frank Friend")


@pytest.fixture
def third_user(client):
    return register_and_login(client, "third@example.com", name="Theo Third")


@pytest.fixture
def auth(user):
    return user["headers"]


@pytest.fixture
def make_list(client):
    def _make(headers, name="Groceries", **extra):
        resp = client.post("/api/v1/lists", json={"name": name, **extra}, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]
    return _make


@pytest.fixture
def add_item(client):
    def _add(headers, list_id, name="Milk", **extra):
        resp = client.post(f"/api/v1/lists/{list_id}/items", json={"name": name, **extra}, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]
    return _add


@pytest.fixture
def share(client):
    def _share(headers, list_id, email, role=None):
        body = {"email": email}
        if role:
            body["role"] = role
        return client.post(f"/api/v1/lists/{list_id}/collaborators", json=body, headers=headers)
    return _share
