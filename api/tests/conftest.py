"""Pytest fixtures for API and storage testing."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.database import get_db
from app.core.security import get_password_hash, create_user_token
from app.models.base import Base
from app.models.user import User
from app.schemas.query import Query
from app.storage.local import LocalAdapter, MemoryKeyValueStore
from app.storage.remote import RemoteAdapter
from tests.fakes import FakePostgrestSession

# In-memory SQLite for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Test client with database override."""
    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_user(db_session, email, name, password, is_admin=False):
    user = User(
        email=email,
        name=name,
        password_hash=get_password_hash(password),
        is_admin=is_admin,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def bearer(user):
    token = create_user_token(user.id, user.email, user.is_admin)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_user(db_session):
    """Create a test user."""
    return make_user(db_session, "test@example.com", "Test User", "testpass123")


@pytest.fixture
def other_user(db_session):
    """A second regular user."""
    return make_user(db_session, "other@example.com", "Other User", "otherpass123")


@pytest.fixture
def admin_user(db_session):
    """Create an admin user."""
    return make_user(db_session, "admin@example.com", "Admin User", "admin123", is_admin=True)


@pytest.fixture
def auth_headers(test_user):
    """Get authorization headers for test user."""
    return bearer(test_user)


@pytest.fixture
def other_headers(other_user):
    return bearer(other_user)


@pytest.fixture
def admin_headers(admin_user):
    """Get authorization headers for admin user."""
    return bearer(admin_user)


@pytest.fixture
def make_query():
    """Factory for logical query records."""
    def _make(query_id, user_id, visibility=None, **overrides):
        fields = {
            "id": query_id,
            "name": f"Test Query {query_id}",
            "sql": "SELECT * FROM test",
            "description": "Test description",
            "result": "Test result",
            "date": "2023-01-01",
            "timestamp": "2023-01-01 12:00:00",
            "current_version": 1,
            "tags": [],
            "is_favorite": False,
            "user_id": user_id,
        }
        if visibility is not None:
            fields["visibility"] = visibility
        fields.update(overrides)
        return Query(**fields)
    return _make


@pytest.fixture
def kv_store():
    return MemoryKeyValueStore()


@pytest.fixture
def local_adapter(kv_store):
    return LocalAdapter(kv_store)


@pytest.fixture
def postgrest():
    return FakePostgrestSession()


@pytest.fixture
def remote_adapter(postgrest):
    return RemoteAdapter("https://notebook.example.co", "anon-key", session=postgrest)
