"""
Shared pytest fixtures for CareLink backend tests.

Sets up an isolated SQLite test database and a FastAPI TestClient
with the get_db and get_storage dependencies overridden.
"""

import os
import sys
from pathlib import Path

# Ensure the backend package is importable regardless of cwd
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Must be set before the app (and its engine) is imported
SQLALCHEMY_TEST_URL = "sqlite:///./test_carelink.db"
os.environ["DATABASE_URL"] = SQLALCHEMY_TEST_URL

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from carelink.main import app
from carelink.core.database import Base, get_db
from carelink.core.security import create_access_token, hash_password
from carelink.models import DoctorRequest, MedicalDocument, Session, User
from carelink.services.storage import LocalFileStorage, get_storage

# ── Test database (SQLite file, shared across the session) ────────────
test_engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Replace the configured database session with a SQLite test session."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


# ── Session-scoped: create tables once, drop after all tests ──────────
@pytest.fixture(scope="session", autouse=True)
def create_test_tables():
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()
    db_path = Path("./test_carelink.db")
    if db_path.exists():
        try:
            db_path.unlink()
        except PermissionError:
            pass  # Windows may still hold the file


# ── Function-scoped: wipe all rows between tests ──────────────────────
@pytest.fixture(autouse=True)
def clean_tables():
    """Delete every row before each test to keep tests independent."""
    session = TestingSessionLocal()
    for model in (Session, MedicalDocument, DoctorRequest, User):
        session.query(model).delete()
    session.commit()
    session.close()
    yield


# ── Function-scoped: uploads land in a per-test temp directory ────────
@pytest.fixture()
def storage(tmp_path):
    store = LocalFileStorage(str(tmp_path / "uploads"))
    app.dependency_overrides[get_storage] = lambda: store
    yield store
    app.dependency_overrides.pop(get_storage, None)


@pytest.fixture()
def client(storage):
    """Return a FastAPI TestClient backed by the SQLite test database."""
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db():
    """Yield a SQLAlchemy session for seeding test data."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


# ── data helpers ──────────────────────────────────────────────────────
@pytest.fixture()
def make_user(db):
    """Insert a user row directly; returns the refreshed ``User``."""
    counter = {"n": 0}

    def _make(role="patient", online=False, name=None, password="Secret123", **extra):
        counter["n"] += 1
        user = User(
            full_name=name or f"Test {role.title()} {counter['n']}",
            email=f"{role}{counter['n']}@example.com",
            password_hash=hash_password(password),
            role=role,
            is_online=online,
            **extra,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def auth_header():
    """Bearer header for *user*, bypassing the login cookie."""

    def _header(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _header
