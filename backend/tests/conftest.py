from __future__ import annotations

import os
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

# Settings refuse to load without these; set them before any app import.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-at-least-32-characters")

from cemetery_api.auth import create_access_token, get_password_hash, principal_for  # noqa: E402
from cemetery_api.config import Settings  # noqa: E402
from cemetery_api.database import Database  # noqa: E402
from cemetery_api.main import create_app  # noqa: E402
from cemetery_api.models import User  # noqa: E402
from cemetery_api.rate_limit import MemoryCounterStore  # noqa: E402

TEST_SECRET = "unit-test-signing-secret-0123456789abcdef"
PASSWORD = "correct-horse-battery"

# Hash once; bcrypt is deliberately slow.
_PASSWORD_HASH = get_password_hash(PASSWORD)


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_SECRET,
        "ENV": "test",
        "ALLOWED_ORIGINS": "http://localhost:5173",
        "RATE_LIMIT_MAX_REQUESTS": 1000,
        "AUTH_RATE_LIMIT_MAX_REQUESTS": 1000,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def database() -> Iterator[Database]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = Database.from_engine(engine)
    db.create_all()
    yield db
    engine.dispose()


@pytest.fixture
def app(settings: Settings, database: Database):
    return create_app(settings, database=database, counter_store=MemoryCounterStore())


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


def create_user(database: Database, *, email: str, role: str = "staff", name: str = "Test User") -> User:
    session = database.session()
    try:
        user = User(email=email, password_hash=_PASSWORD_HASH, name=name, role=role)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user
    finally:
        session.close()


@pytest.fixture
def admin_user(database: Database) -> User:
    return create_user(database, email="admin@example.com", role="admin", name="Admin User")


@pytest.fixture
def staff_user(database: Database) -> User:
    return create_user(database, email="staff@example.com", role="staff", name="Staff User")


def bearer(user: User, settings: Settings) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(principal_for(user), settings)}"}


def csrf_headers(client: TestClient) -> dict[str, str]:
    """Fetch the CSRF token; the cookie lands in the client's jar."""
    response = client.get("/api/csrf-token")
    assert response.status_code == 200
    return {"x-csrf-token": response.json()["csrfToken"]}


@pytest.fixture
def staff_headers(client: TestClient, staff_user: User, settings: Settings) -> dict[str, str]:
    return {**bearer(staff_user, settings), **csrf_headers(client)}


@pytest.fixture
def admin_headers(client: TestClient, admin_user: User, settings: Settings) -> dict[str, str]:
    return {**bearer(admin_user, settings), **csrf_headers(client)}
