import os

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid external dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from src.api.main import create_app  # noqa: E402
from src.api.settings import Settings  # noqa: E402

TEST_SECRET = "test-secret"
TEST_PASSWORD = "s3cret-pass"


@pytest.fixture
def settings():
    # Low bcrypt cost keeps registration fast
    return Settings(jwt_secret=TEST_SECRET, session_secret="test-session", bcrypt_rounds=4)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # Entering the context runs the lifespan, which opens the stores
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(client):
    """Register a user through the API and return bearer headers for it."""

    def _make(username="alice", password=TEST_PASSWORD):
        res = client.post("/api/auth/register", json={"username": username, "password": password})
        assert res.status_code == 201, res.text
        res = client.post("/api/auth/login", json={"username": username, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['token']}"}

    return _make
