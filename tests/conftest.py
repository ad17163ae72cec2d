"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from favourites_rest import create_app
from favourites_rest.models import UserIdentity
from favourites_rest.tokens import TokenService
from favourites_rest.users import LocalUserStore


@pytest.fixture
def temp_dir():
    """Temporary directory fixture."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config():
    """Test configuration."""
    return {
        "auth": {"jwt_secret": "test-secret", "jwt_expiry": 3600},
        "user_management": {"provider": "local", "max_favourites": 50, "local": {}},
        "cors": {"enabled": True, "origins": ["*"]},
        "logging": {"level": "INFO"},
    }


@pytest.fixture
def app(test_config):
    """Create test FastAPI app."""
    return create_app(test_config)


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def token_service():
    """Token service with a one hour expiry."""
    return TokenService(secret="test-secret", expiry=3600)


@pytest.fixture
def identity():
    """Sample token identity."""
    return UserIdentity(id="64f1c0ffee", userName="alice")


@pytest.fixture
def user_store():
    """In-memory local user store."""
    return LocalUserStore({"max_favourites": 3})


@pytest.fixture
def login(client):
    """Register and log in a user, returning the bearer token."""

    def _login(user_name="alice", password="p1"):
        client.post("/api/user/register", json={"userName": user_name, "password": password})
        response = client.post(
            "/api/user/login", json={"userName": user_name, "password": password}
        )
        assert response.status_code == 200
        return response.json()["token"]

    return _login


@pytest.fixture
def auth_headers(login):
    """Authorization headers for a freshly registered user."""
    return {"Authorization": f"Bearer {login()}"}
