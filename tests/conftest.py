"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ipgeo_api import models  # noqa: F401
from ipgeo_api.config import Settings
from ipgeo_api.database import Base, get_db
from ipgeo_api.main import create_app


class AuthHeaders(dict):
    """Dict subclass that also stores the registered user's id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


TEST_EMAIL = "test@example.com"
TEST_PASSWORD = "testpass123"

# In-memory SQLite shared by the test session and the request threads
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def settings():
    """Settings for tests: fixed secret and the cheapest bcrypt cost."""
    return Settings(
        environment="test",
        database_url="sqlite://",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        ipinfo_base_url="https://ipinfo.test",
    )


@pytest.fixture
def app(settings):
    """A fresh application, so rate-limit counters start at zero."""
    return create_app(settings)


@pytest.fixture(scope="function")
def client(app, db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    """Register a user and return auth headers with user info."""
    response = client.post(
        "/api/register",
        json={"email": TEST_EMAIL, "password": TEST_PASSWORD, "confirmPassword": TEST_PASSWORD},
    )
    assert response.status_code == 201
    data = response.json()

    return AuthHeaders(
        {"Authorization": f"Bearer {data['token']}"},
        user_id=data["user"]["id"],
        email=TEST_EMAIL,
    )
