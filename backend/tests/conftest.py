# backend/tests/conftest.py
"""
Shared fixtures: an in-memory SQLite database per test, a TestClient wired to
it through dependency overrides, and an authenticated admin.
"""
import os

# Must be set before anything imports parish.config / parish.db
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["JWT_SECRET"] = "test-jwt-secret"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from parish.auth import create_access_token, hash_password  # noqa: E402
from parish.db import Base, get_db  # noqa: E402
from parish.main import app  # noqa: E402
from parish.models import User  # noqa: E402

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

ADMIN_PASSWORD = "correct-horse"


@pytest.fixture
def db():
    """Fresh schema and session for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def second_db(db):
    """Another session on the same database, standing in for a second admin."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """TestClient whose requests share the test's session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_user(db) -> User:
    user = User(username="admin", password_hash=hash_password(ADMIN_PASSWORD), role="ADMIN")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def auth_headers(admin_user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(admin_user)}"}
