"""
Shared test fixtures for all test modules.

Provides:
- Test environment setup (TESTING=true, secret key)
- test_settings / app / client: a fresh application per test, bound to its
  own in-memory SQLite database
- auth_headers / other_auth_headers: two independent logged-in users
- db_session: bare SQLAlchemy session for repository tests
"""

import os

# Must be set before neuroguide.config is imported
os.environ["TESTING"] = "true"
os.environ["NEUROGUIDE_SECRET_KEY"] = os.environ.get("NEUROGUIDE_SECRET_KEY", "test-secret-key-for-testing")

from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient

from neuroguide.config import Settings
from neuroguide.database import Database
from neuroguide.main import create_app

TEST_SECRET = "test-secret-key-for-testing"
TEST_PASSWORD = "secret123"

# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at an in-memory database and a temp upload dir."""
    return Settings(
        database_url="sqlite://",
        secret_key=TEST_SECRET,
        testing=True,
        environment="development",
        allowed_origins="http://localhost:5173",
        legacy_upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def app(test_settings):
    return create_app(test_settings)


@pytest.fixture
def client(app):
    """Test client with lifespan (tables created on enter)."""
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Auth Fixtures
# =============================================================================

@pytest.fixture
def register_and_login(client) -> Callable[..., Dict[str, str]]:
    """Factory: register a user, log in, return Authorization headers."""

    def _register_and_login(email: str, password: str = TEST_PASSWORD, name: str = "Test User") -> Dict[str, str]:
        response = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
        assert response.status_code == 201, response.text
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _register_and_login


@pytest.fixture
def auth_headers(register_and_login) -> Dict[str, str]:
    return register_and_login("alice@example.com", name="Alice")


@pytest.fixture
def other_auth_headers(register_and_login) -> Dict[str, str]:
    return register_and_login("bob@example.com", name="Bob")


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def database():
    """Standalone in-memory database with all tables."""
    db = Database("sqlite://")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


# =============================================================================
# Sample Data
# =============================================================================

def make_pdf_bytes(size: int = 2048) -> bytes:
    """PDF-looking bytes of exactly ``size`` bytes."""
    header = b"%PDF-1.4\n"
    if size <= len(header):
        return header[:size]
    body = bytes(range(256)) * (size // 256 + 1)
    return header + body[: size - len(header)]


@pytest.fixture
def pdf_bytes() -> bytes:
    return make_pdf_bytes()


@pytest.fixture
def make_pdf():
    return make_pdf_bytes
